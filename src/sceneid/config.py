"""Client configuration for the SceneID OAuth client.

Configuration can be built explicitly or read from environment variables.
All variables share a common prefix (default ``SCENEID_``):

CLIENT_ID, CLIENT_SECRET, REDIRECT_URI
    Mandatory OAuth client registration values.
SCOPE
    Space separated list of requested scopes.
FORMAT
    Resource response format, ``json`` (default) or ``xml``.
TOKEN_URL, AUTHORIZE_URL, RESOURCE_URL
    Endpoint overrides, mostly useful against staging deployments.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Final, Literal

from sceneid.errors import ConfigurationError

logger = logging.getLogger("sceneid.config")

ResponseFormat = Literal["json", "xml"]

SUPPORTED_FORMATS: Final[tuple[str, ...]] = ("json", "xml")

TOKEN_URL: Final[str] = "https://id.scene.org/oauth/token/"
AUTHORIZE_URL: Final[str] = "https://id.scene.org/oauth/authorize/"
RESOURCE_URL: Final[str] = "https://id.scene.org/3/api/3.0"

_MANDATORY: Final[tuple[str, ...]] = ("client_id", "client_secret", "redirect_uri")


def normalize_scope(scope: str | Iterable[str] | None) -> tuple[str, ...]:
    """Return *scope* as an ordered tuple; strings are split on whitespace."""
    if scope is None:
        return ()
    if isinstance(scope, str):
        return tuple(s for s in re.split(r"\s+", scope) if s)
    return tuple(s for s in scope if s)


def normalize_format(fmt: str) -> ResponseFormat:
    """Lower-case *fmt* and reject anything but ``json`` / ``xml``."""
    value = (fmt or "").strip().lower()
    if value not in SUPPORTED_FORMATS:
        raise ConfigurationError("Format has to be either XML or JSON")
    return value  # type: ignore[return-value]


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """OAuth client registration plus request preferences."""

    client_id: str
    client_secret: str
    redirect_uri: str
    scope: tuple[str, ...] = ()
    format: ResponseFormat = "json"
    token_url: str = TOKEN_URL
    authorize_url: str = AUTHORIZE_URL
    resource_url: str = RESOURCE_URL

    def __post_init__(self) -> None:
        for name in _MANDATORY:
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError(f"'{name}' invalid or missing from client configuration")
        object.__setattr__(self, "scope", normalize_scope(self.scope))
        object.__setattr__(self, "format", normalize_format(self.format))

    @property
    def scope_string(self) -> str:
        return " ".join(self.scope)

    def with_scope(self, scope: str | Iterable[str] | None) -> ClientConfig:
        return replace(self, scope=normalize_scope(scope))

    def with_format(self, fmt: str) -> ClientConfig:
        return replace(self, format=normalize_format(fmt))

    @classmethod
    def from_env(cls, prefix: str = "SCENEID_") -> ClientConfig:
        """Build a configuration from ``{prefix}*`` environment variables.

        Raises
        ------
        ConfigurationError
            If a mandatory variable is unset or empty.
        """

        def _get(key: str) -> str | None:
            value = os.getenv(f"{prefix}{key}")
            return value.strip() if value else None

        config = cls(
            client_id=_get("CLIENT_ID") or "",
            client_secret=_get("CLIENT_SECRET") or "",
            redirect_uri=_get("REDIRECT_URI") or "",
            scope=normalize_scope(_get("SCOPE")),
            format=_get("FORMAT") or "json",
            token_url=_get("TOKEN_URL") or TOKEN_URL,
            authorize_url=_get("AUTHORIZE_URL") or AUTHORIZE_URL,
            resource_url=(_get("RESOURCE_URL") or RESOURCE_URL).rstrip("/"),
        )
        logger.debug("Loaded client configuration from %s* environment", prefix)
        return config
