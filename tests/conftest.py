"""Shared pytest configuration and fakes for the SceneID client tests."""

from __future__ import annotations

import json
from typing import Any, Mapping

import pytest

from sceneid.oauth import SceneIDOAuth
from sceneid.store import MemoryTokenStore


def pytest_addoption(parser):
    """Add live option to pytest."""
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="run live tests against the SceneID endpoints",
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless explicitly requested."""
    if not config.getoption("--live", default=False):
        skip_live = pytest.mark.skip(reason="Need --live option to run")
        for item in items:
            if "live" in item.keywords:
                item.add_marker(skip_live)


# --------------------------------------------------------------------------- #
# Fakes                                                                       #
# --------------------------------------------------------------------------- #
class FakeTransport:
    """Recording transport returning queued bodies in order."""

    def __init__(self, *bodies: Any) -> None:
        self.bodies: list[Any] = list(bodies)
        self.calls: list[dict[str, Any]] = []

    def queue(self, *bodies: Any) -> None:
        self.bodies.extend(bodies)

    def __call__(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> str:
        self.calls.append(
            {
                "method": method,
                "url": url,
                "params": dict(params or {}),
                "data": dict(data or {}),
                "headers": dict(headers or {}),
            }
        )
        if not self.bodies:
            raise AssertionError(f"unexpected request {method} {url}")
        body = self.bodies.pop(0)
        return body if isinstance(body, str) else json.dumps(body)


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def store() -> MemoryTokenStore:
    return MemoryTokenStore()


@pytest.fixture()
def oauth(transport: FakeTransport, store: MemoryTokenStore) -> SceneIDOAuth:
    """Client wired to the fake transport and an empty in-memory store."""
    return SceneIDOAuth(
        "myPortalClientID",
        "verySecretHashThing",
        "http://my.domain.tld/return.url",
        store=store,
        transport=transport,
    )
