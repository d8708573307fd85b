"""Logging helpers for the SceneID OAuth client.

Tokens, codes, state values and the client secret must never reach a log
record in full; :func:`mask_sensitive` keeps a short prefix for correlation.

Token-endpoint calls log through :func:`grant_logger`, which stamps every
record with two extra attributes usable in formatters and filters:

``client_id``
    The masked OAuth client identifier.
``grant_type``
    ``client_credentials``, ``authorization_code`` or ``refresh_token``.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any


def mask_sensitive(value: Any, keep: int = 4) -> str:
    """Return *value* with everything but the first *keep* characters hidden."""
    if value is None:
        return "<none>"
    text = str(value)
    if len(text) <= keep:
        return "*" * len(text)
    return f"{text[:keep]}****"


class GrantLogAdapter(logging.LoggerAdapter):
    """Attach the grant context to records; call-site extras take precedence."""

    def process(self, msg: str, kwargs: MutableMapping[str, Any]):
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def grant_logger(client_id: str, grant_type: str, name: str = "sceneid.oauth") -> GrantLogAdapter:
    """Return an adapter over *name* carrying the masked client id and grant type."""
    return GrantLogAdapter(
        logging.getLogger(name),
        {"client_id": mask_sensitive(client_id, 6), "grant_type": grant_type},
    )
