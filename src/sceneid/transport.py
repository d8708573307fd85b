"""HTTP transport used by the SceneID OAuth client.

The client only needs one capability from the network layer: issue a request
and hand back the body text. Anything callable with the :class:`Transport`
signature can be injected; :func:`default_transport` builds one on top of a
``requests`` session.

Non-2xx replies carrying a JSON body are returned as-is because the provider
reports grant and token errors that way. Any other failure surfaces as the
``requests`` exception that caused it.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from sceneid.errors import ConfigurationError, TransportUnavailableError

if TYPE_CHECKING:  # pragma: no cover
    import requests

_LOG = logging.getLogger("sceneid.transport")

DEFAULT_TIMEOUT: tuple[float, float] = (5, 20)
_TIMEOUT_ENV = "SCENEID_HTTP_TIMEOUT"


@runtime_checkable
class Transport(Protocol):
    """Callable issuing one HTTP request and returning the raw body."""

    def __call__(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> str: ...


class RequestsTransport:
    """:class:`Transport` backed by a :class:`requests.Session`."""

    def __init__(
        self,
        session: requests.Session,
        *,
        timeout: float | tuple[float, float] = DEFAULT_TIMEOUT,
    ) -> None:
        self.session = session
        self.timeout = timeout

    def __call__(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> str:
        resp = self.session.request(
            method.upper(),
            url,
            params=dict(params) if params else None,
            data=dict(data) if data else None,
            headers=dict(headers) if headers else None,
            timeout=self.timeout,
        )
        _LOG.debug("%s %s -> %s", method.upper(), url, resp.status_code)
        if not resp.ok:
            try:
                resp.json()
            except ValueError:
                resp.raise_for_status()
        return resp.text


def _timeout_from_env() -> float | tuple[float, float]:
    raw = os.getenv(_TIMEOUT_ENV)
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        return (DEFAULT_TIMEOUT[0], float(raw))
    except ValueError:
        _LOG.warning("Ignoring non-numeric %s=%r", _TIMEOUT_ENV, raw)
        return DEFAULT_TIMEOUT


def default_transport(timeout: float | tuple[float, float] | None = None) -> Transport:
    """Return a :class:`RequestsTransport` on a fresh session.

    Raises
    ------
    TransportUnavailableError
        If ``requests`` cannot be imported.
    """
    try:
        import requests  # local import keeps the core importable without an HTTP stack
    except ImportError as exc:
        raise TransportUnavailableError("requests is required for the default HTTP transport") from exc

    return RequestsTransport(requests.Session(), timeout=timeout or _timeout_from_env())


def ensure_transport(transport: Any | None) -> Transport:
    """Return *transport*, or the default one when *None*."""
    if transport is None:
        return default_transport()
    if not callable(transport):
        raise ConfigurationError(f"transport must be callable, got {type(transport).__name__}")
    return transport
