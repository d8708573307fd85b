"""SceneIDOAuth – OAuth 2.0 client for the SceneID identity provider.

The client owns a :class:`~sceneid.config.ClientConfig`, a
:class:`~sceneid.store.TokenStore` handle and a transport callable, and
implements:

* the client-credentials grant (no end-user interaction),
* the authorization-code grant (redirect, callback, code exchange),
* the refresh-token grant,
* Bearer-authenticated resource requests with a single refresh-and-retry when
  the provider reports ``invalid_token``.

Tokens are never checked for expiry locally; validity is discovered when the
provider rejects them. **Secrets are redacted** from all log output.
"""

from __future__ import annotations

import base64
import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Final
from urllib.parse import urlencode

from starlette.responses import RedirectResponse

from sceneid.config import AUTHORIZE_URL, RESOURCE_URL, TOKEN_URL, ClientConfig, ResponseFormat
from sceneid.errors import AuthenticationError, ConfigurationError, ProtocolError
from sceneid.log_utils import grant_logger, mask_sensitive
from sceneid.models import AuthFlowState, ProviderError, TokenGrant, parse_provider_error, parse_token_response
from sceneid.state import CONSUMED_STATE, generate_state, states_match
from sceneid.store import (
    ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    STATE_KEY,
    MemoryTokenStore,
    TokenStore,
    is_token_store,
)
from sceneid.transport import Transport, ensure_transport

_LOG = logging.getLogger("sceneid.oauth")

_NOT_AUTHENTICATED: Final[str] = "not authenticated"


class SceneIDOAuth:
    """OAuth 2.0 client handling grants, token storage and resource calls."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        *,
        scope: str | Iterable[str] | None = None,
        format: str = "json",  # noqa: A002
        store: TokenStore | None = None,
        transport: Transport | None = None,
        token_url: str = TOKEN_URL,
        authorize_url: str = AUTHORIZE_URL,
        resource_url: str = RESOURCE_URL,
    ) -> None:
        config = ClientConfig(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            scope=scope,  # type: ignore[arg-type]
            format=format,  # type: ignore[arg-type]
            token_url=token_url,
            authorize_url=authorize_url,
            resource_url=resource_url.rstrip("/"),
        )
        self.transport: Transport = ensure_transport(transport)
        self.config: ClientConfig = config
        self.store: TokenStore = MemoryTokenStore()
        if store is not None:
            self.set_storage(store)
        self.flow_state: AuthFlowState = AuthFlowState.UNAUTHENTICATED

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        store: TokenStore | None = None,
        transport: Transport | None = None,
    ) -> SceneIDOAuth:
        """Build a client around an existing :class:`ClientConfig`."""
        return cls(
            config.client_id,
            config.client_secret,
            config.redirect_uri,
            scope=config.scope,
            format=config.format,
            store=store,
            transport=transport,
            token_url=config.token_url,
            authorize_url=config.authorize_url,
            resource_url=config.resource_url,
        )

    @classmethod
    def from_env(
        cls,
        prefix: str = "SCENEID_",
        *,
        store: TokenStore | None = None,
        transport: Transport | None = None,
    ) -> SceneIDOAuth:
        """Build a client from ``{prefix}*`` environment variables."""
        return cls.from_config(ClientConfig.from_env(prefix), store=store, transport=transport)

    # ------------------------------------------------------------------ #
    # Configuration                                                      #
    # ------------------------------------------------------------------ #
    @property
    def format(self) -> ResponseFormat:
        return self.config.format

    @property
    def resource_url(self) -> str:
        return self.config.resource_url

    def set_scope(self, scope: str | Iterable[str] | None) -> None:
        """Set the requested scopes; a string is split on whitespace."""
        self.config = self.config.with_scope(scope)

    def set_format(self, fmt: str) -> None:
        """Set the resource response format (``json`` or ``xml``)."""
        self.config = self.config.with_format(fmt)

    def set_storage(self, store: TokenStore) -> None:
        """Swap in a new token store; values in the previous one are not copied."""
        if not is_token_store(store):
            raise ConfigurationError("Storage must implement TokenStore (get/set)")
        self.store = store
        _LOG.debug("Token store set to %s", type(store).__name__)

    def unpack_format(self, data: str | bytes) -> Any:
        """Decode a resource reply according to the configured format."""
        if self.config.format == "xml":
            raise NotImplementedError("XML responses are not supported")
        return json.loads(data)

    # ------------------------------------------------------------------ #
    # Token endpoint                                                     #
    # ------------------------------------------------------------------ #
    def _basic_auth_header(self) -> dict[str, str]:
        raw = f"{self.config.client_id}:{self.config.client_secret}".encode("utf-8")
        return {"Authorization": "Basic " + base64.b64encode(raw).decode("ascii")}

    def _token_request(self, params: dict[str, str]) -> TokenGrant:
        """POST *params* to the token endpoint and store the resulting tokens."""
        grant_type = params["grant_type"]
        log = grant_logger(self.config.client_id, grant_type)

        body = self.transport(
            "POST",
            self.config.token_url,
            data=params,
            headers=self._basic_auth_header(),
        )
        result = parse_token_response(body)

        if isinstance(result, ProviderError):
            log.warning(
                "Token request rejected error=%s",
                result.error or "malformed_response",
            )
            raise AuthenticationError(
                "Authorization failed",
                error=result.error,
                error_description=result.error_description,
            )

        self.store.set(ACCESS_TOKEN_KEY, result.access_token)
        if result.refresh_token:
            self.store.set(REFRESH_TOKEN_KEY, result.refresh_token)
        log.info(
            "Obtained access token %s (refresh token: %s)",
            mask_sensitive(result.access_token, 6),
            "yes" if result.refresh_token else "no",
        )
        return result

    def acquire_client_credentials_token(self) -> bool:
        """Obtain an access token with the client-credentials grant.

        Raises
        ------
        AuthenticationError
            If the reply is malformed or carries no access token.
        """
        params = {"grant_type": "client_credentials"}
        if self.config.scope:
            params["scope"] = self.config.scope_string
        self._token_request(params)
        return True

    # ------------------------------------------------------------------ #
    # Authorization-code flow                                            #
    # ------------------------------------------------------------------ #
    def generate_state(self) -> str:
        return generate_state()

    def get_auth_url(self) -> str:
        """Return the provider authorize URL with a freshly stored state."""
        state = self.generate_state()
        self.store.set(STATE_KEY, state)

        query_params: dict[str, str] = {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.redirect_uri,
            "response_type": "code",
            "state": state,
        }
        if self.config.scope:
            query_params["scope"] = self.config.scope_string

        self.flow_state = AuthFlowState.REDIRECT_ISSUED
        _LOG.debug("Built authorize URL state=%s", mask_sensitive(state, 4))
        return f"{self.config.authorize_url}?{urlencode(query_params)}"

    def perform_auth_redirect(self) -> RedirectResponse:
        """Return a redirect to the provider; the caller must return it as-is."""
        return RedirectResponse(self.get_auth_url(), status_code=302)

    def process_auth_response(
        self,
        code: str | None = None,
        state: str | None = None,
        *,
        query_params: Mapping[str, str] | None = None,
    ) -> bool:
        """Exchange the authorization code received on the callback.

        *code* and *state* fall back to ``query_params`` (for instance
        ``request.query_params``) when not given explicitly.

        Raises
        ------
        AuthenticationError
            If the provider reported an error on the callback, or rejected
            the code exchange.
        ProtocolError
            If no code was received, or the state does not match the stored
            one.
        """
        query = query_params or {}

        code = code or query.get("code")
        if not code:
            provider_error = query.get("error")
            if provider_error:
                raise AuthenticationError(
                    "Authorization denied",
                    error=provider_error,
                    error_description=query.get("error_description"),
                )
            raise ProtocolError("missing authorization code")

        state = state or query.get("state")
        expected = self.store.get(STATE_KEY)
        if expected is not None:
            if not states_match(expected, state):
                _LOG.warning(
                    "State mismatch on callback expected=%s received=%s",
                    mask_sensitive(expected, 4),
                    mask_sensitive(state, 4),
                )
                raise ProtocolError("state mismatch")
            self.store.set(STATE_KEY, CONSUMED_STATE)

        self.flow_state = AuthFlowState.CALLBACK_PENDING
        self._token_request(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.config.redirect_uri,
            }
        )
        self.flow_state = AuthFlowState.AUTHENTICATED
        return True

    # ------------------------------------------------------------------ #
    # Refresh                                                            #
    # ------------------------------------------------------------------ #
    def refresh_token(self) -> bool:
        """Exchange the stored refresh token for a new access token.

        Raises
        ------
        AuthenticationError
            If no refresh token is stored, or the provider rejects it.
        """
        refresh_token = self.store.get(REFRESH_TOKEN_KEY)
        if not refresh_token:
            raise AuthenticationError(_NOT_AUTHENTICATED)

        self._token_request({"grant_type": "refresh_token", "refresh_token": refresh_token})
        return True

    # ------------------------------------------------------------------ #
    # Resource requests                                                  #
    # ------------------------------------------------------------------ #
    def resource_request(
        self,
        url: str | None = None,
        method: str = "GET",
        params: Mapping[str, Any] | None = None,
    ) -> str:
        """Send a Bearer-authenticated request and return the raw body."""
        access_token = self.store.get(ACCESS_TOKEN_KEY)
        if not access_token:
            raise AuthenticationError(_NOT_AUTHENTICATED)

        url = url or self.config.resource_url
        method = method.upper()
        query: dict[str, Any] = {}
        data: dict[str, Any] | None = None
        if method == "GET":
            query.update(params or {})
        else:
            data = dict(params or {})
        query["format"] = self.config.format

        _LOG.debug("Resource request %s %s", method, url)
        return self.transport(
            method,
            url,
            params=query,
            data=data,
            headers={"Authorization": f"Bearer {access_token}"},
        )

    def resource_request_refresh(
        self,
        url: str | None = None,
        method: str = "GET",
        params: Mapping[str, Any] | None = None,
    ) -> str:
        """Like :meth:`resource_request`, refreshing once on ``invalid_token``.

        The retried reply is returned whatever it contains.
        """
        data = self.resource_request(url, method, params)
        error = parse_provider_error(data)
        if error is not None and error.is_invalid_token:
            _LOG.info("Access token rejected as invalid_token; refreshing and retrying once")
            self.refresh_token()
            data = self.resource_request(url, method, params)
        return data

    def reset_tokens(self) -> None:
        """Forget the stored tokens and state."""
        for key in (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, STATE_KEY):
            self.store.set(key, None)
        self.flow_state = AuthFlowState.UNAUTHENTICATED
        _LOG.debug("Cleared stored tokens and state")
