"""SceneID 3.0 resource API.

:class:`SceneID` exposes the named API calls on top of any object that can
issue refresh-aware authenticated requests and decode their replies (the
:class:`AuthenticatedRequester` protocol, implemented by
:class:`~sceneid.oauth.SceneIDOAuth`).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from sceneid.oauth import SceneIDOAuth

_LOG = logging.getLogger("sceneid.api")


class AuthenticatedRequester(Protocol):
    """Capabilities :class:`SceneID` needs from an OAuth client."""

    resource_url: str

    def resource_request_refresh(
        self,
        url: str | None = None,
        method: str = "GET",
        params: Mapping[str, Any] | None = None,
    ) -> str: ...

    def unpack_format(self, data: str | bytes) -> Any: ...

    def reset_tokens(self) -> None: ...


class SceneID:
    """Typed access to the SceneID resource endpoints."""

    def __init__(self, oauth: AuthenticatedRequester) -> None:
        self.oauth = oauth

    @classmethod
    def create(cls, client_id: str, client_secret: str, redirect_uri: str, **kwargs: Any) -> SceneID:
        """Build a :class:`SceneIDOAuth` client and wrap it."""
        return cls(SceneIDOAuth(client_id, client_secret, redirect_uri, **kwargs))

    def _get(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        url = f"{self.oauth.resource_url.rstrip('/')}{path}"
        _LOG.debug("GET %s", path)
        data = self.oauth.resource_request_refresh(url, "GET", params)
        return self.oauth.unpack_format(data)

    def user(self, user_id: int | str) -> Any:
        """Return the public profile of the user with *user_id*."""
        return self._get("/user/", {"id": int(user_id)})

    def me(self) -> Any:
        """Return the profile of the user who authorized the client."""
        return self._get("/me/")

    def reset(self) -> None:
        """Drop stored tokens; every later call needs a new grant."""
        self.oauth.reset_tokens()
