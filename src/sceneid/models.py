"""Typed, immutable records produced by parsing provider replies.

Every token-endpoint reply is parsed into a :data:`TokenResult`, which is
either a :class:`TokenGrant` or a :class:`ProviderError`; callers branch on the
variant instead of probing raw JSON.

Resource replies share one wire rule with token replies: a body is an error
payload iff it decodes to a JSON object carrying a string ``error`` member.
"""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from typing import Any, Union

INVALID_TOKEN = "invalid_token"


class AuthFlowState(str, enum.Enum):
    """Position of a client instance in the authorization-code flow.

    Held on the instance only and never written to the token store, so a
    client rebuilt per web request starts again at ``UNAUTHENTICATED``. The
    stored ``state`` value is what ties a callback to its redirect.
    """

    UNAUTHENTICATED = "unauthenticated"
    REDIRECT_ISSUED = "redirect_issued"
    CALLBACK_PENDING = "callback_pending"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True, slots=True)
class TokenGrant:
    """Tokens issued by a successful grant exchange."""

    access_token: str
    refresh_token: str | None = None


@dataclass(frozen=True, slots=True)
class ProviderError:
    """Error reported by the provider, or a reply that could not be read."""

    error: str | None = None
    error_description: str | None = None

    @property
    def is_invalid_token(self) -> bool:
        return self.error == INVALID_TOKEN


TokenResult = Union[TokenGrant, ProviderError]


def _decode_object(body: str | bytes | None) -> dict[str, Any] | None:
    if not body:
        return None
    try:
        data = json.loads(body)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def parse_token_response(body: str | bytes | None) -> TokenResult:
    """Parse a token-endpoint reply into a :data:`TokenResult`.

    A reply without a non-empty ``access_token`` string is a
    :class:`ProviderError`, carrying ``error`` / ``error_description`` when the
    provider sent them.
    """
    data = _decode_object(body)
    if data is None:
        return ProviderError()
    access_token = _optional_str(data.get("access_token"))
    if access_token is None:
        return ProviderError(
            error=_optional_str(data.get("error")),
            error_description=_optional_str(data.get("error_description")),
        )
    return TokenGrant(
        access_token=access_token,
        refresh_token=_optional_str(data.get("refresh_token")),
    )


def parse_provider_error(body: str | bytes | None) -> ProviderError | None:
    """Return the :class:`ProviderError` in a resource reply, if any."""
    data = _decode_object(body)
    if data is None:
        return None
    error = _optional_str(data.get("error"))
    if error is None:
        return None
    return ProviderError(error=error, error_description=_optional_str(data.get("error_description")))
