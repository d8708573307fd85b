"""Token persistence for the SceneID OAuth client.

This module introduces a *narrow* persistence interface
(:class:`TokenStore`) and two implementations:

* :class:`MemoryTokenStore` – a plain dict, created once per logical user
  session and discarded with it.
* :class:`SessionTokenStore` – values kept inside a caller-owned session
  mapping (e.g. starlette's ``request.session``) under a namespace entry.

Keys used by the client are ``accessToken``, ``refreshToken`` and ``state``.
Stores are not locked; each user session is expected to own its store.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any, Final, Protocol, runtime_checkable

if TYPE_CHECKING:  # pragma: no cover
    from starlette.requests import Request

_LOG = logging.getLogger("sceneid.store")

ACCESS_TOKEN_KEY: Final[str] = "accessToken"
REFRESH_TOKEN_KEY: Final[str] = "refreshToken"
STATE_KEY: Final[str] = "state"

SESSION_NAMESPACE: Final[str] = "sceneID"


# --------------------------------------------------------------------------- #
# public interface                                                            #
# --------------------------------------------------------------------------- #


@runtime_checkable
class TokenStore(Protocol):
    """Minimal persistence contract: last write wins per key."""

    def set(self, key: str, value: Any) -> None: ...

    def get(self, key: str) -> Any | None: ...


def is_token_store(obj: object) -> bool:
    """Return *True* if *obj* provides callable ``get`` and ``set``."""
    return (
        isinstance(obj, TokenStore)
        and callable(getattr(obj, "get", None))
        and callable(getattr(obj, "set", None))
    )


# --------------------------------------------------------------------------- #
# implementations                                                             #
# --------------------------------------------------------------------------- #


class MemoryTokenStore(TokenStore):
    """Dict-backed :class:`TokenStore`."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(initial or {})

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def get(self, key: str) -> Any | None:
        return self._values.get(key)

    def __repr__(self) -> str:
        return f"MemoryTokenStore(keys={sorted(self._values)!r})"


class SessionTokenStore(TokenStore):
    """:class:`TokenStore` writing into a session mapping.

    The namespace entry is created on the first :meth:`set`; reads against a
    session that never stored anything return ``None``.
    """

    def __init__(
        self,
        session: MutableMapping[str, Any],
        namespace: str = SESSION_NAMESPACE,
    ) -> None:
        self.session = session
        self.namespace = namespace

    @classmethod
    def from_request(cls, request: Request, namespace: str = SESSION_NAMESPACE) -> SessionTokenStore:
        """Bind a store to ``request.session`` (requires ``SessionMiddleware``)."""
        return cls(request.session, namespace)

    def set(self, key: str, value: Any) -> None:
        bucket = self.session.get(self.namespace)
        if not isinstance(bucket, dict):
            _LOG.debug("Initialising session namespace %s", self.namespace)
            bucket = {}
        bucket[key] = value
        # reassign so session backends notice the change
        self.session[self.namespace] = bucket

    def get(self, key: str) -> Any | None:
        bucket = self.session.get(self.namespace)
        if not isinstance(bucket, dict):
            return None
        return bucket.get(key)
