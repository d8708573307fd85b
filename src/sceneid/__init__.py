"""OAuth 2.0 client for the SceneID identity provider.

Sub-modules
-----------
config
    Client registration, scope/format normalisation and environment loading.
errors
    Exception types raised by the client.
models
    Immutable token / provider-error records and reply parsing.
store
    ``TokenStore`` protocol plus in-memory and session-backed stores.
state
    Anti-forgery ``state`` generation and comparison.
transport
    HTTP transport protocol and the ``requests``-based default.
oauth
    ``SceneIDOAuth`` – grants, refresh and authenticated requests.
api
    ``SceneID`` – named resource calls (``user``, ``me``).
log_utils
    Secret masking and the grant-context logger adapter.

All public objects are re-exported here for convenience.
"""

from __future__ import annotations

from .config import ClientConfig  # noqa: F401
from .errors import (  # noqa: F401
    AuthenticationError,
    ConfigurationError,
    ProtocolError,
    SceneIDError,
    TransportUnavailableError,
)
from .models import AuthFlowState, ProviderError, TokenGrant  # noqa: F401
from .store import MemoryTokenStore, SessionTokenStore, TokenStore  # noqa: F401
from .transport import RequestsTransport, Transport, default_transport  # noqa: F401
from .oauth import SceneIDOAuth  # noqa: F401
from .api import SceneID  # noqa: F401

__all__ = [
    # config
    "ClientConfig",
    # errors
    "SceneIDError",
    "ConfigurationError",
    "TransportUnavailableError",
    "ProtocolError",
    "AuthenticationError",
    # models
    "AuthFlowState",
    "TokenGrant",
    "ProviderError",
    # store
    "TokenStore",
    "MemoryTokenStore",
    "SessionTokenStore",
    # transport
    "Transport",
    "RequestsTransport",
    "default_transport",
    # clients
    "SceneIDOAuth",
    "SceneID",
]
