"""Exception types raised by the SceneID OAuth core.

Only lightweight, **data-carrying** exceptions live here so that web/CLI layers
can transform them into HTTP responses or user-friendly messages.

Transport failures are not wrapped: the ``requests`` exceptions raised by the
default transport reach the caller unchanged.
"""

from __future__ import annotations


class SceneIDError(Exception):
    """Base class for every error raised by :mod:`sceneid`."""


class ConfigurationError(SceneIDError, ValueError):
    """Invalid or missing client parameters, format or token store."""


class TransportUnavailableError(SceneIDError, OSError):
    """The HTTP transport needed to talk to the provider cannot be used."""


class ProtocolError(SceneIDError):
    """The authorization callback is incomplete or fails the state check."""


class AuthenticationError(SceneIDError):
    """Raised when the provider rejects a grant or no token is stored."""

    def __init__(
        self,
        message: str = "Authorization failed",
        *,
        error: str | None = None,
        error_description: str | None = None,
    ) -> None:
        if error_description:
            message = f"{message}: {error_description}"
        super().__init__(message)
        self.error: str | None = error
        self.error_description: str | None = error_description

    def to_payload(self) -> dict[str, str]:
        """Return a JSON-serialisable payload **without secrets**."""
        payload = {"error": self.error or "authentication_failed", "message": str(self)}
        if self.error_description:
            payload["error_description"] = self.error_description
        return payload
