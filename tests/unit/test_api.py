"""Unit tests for the SceneID resource client."""

from __future__ import annotations

import collections.abc
from unittest.mock import MagicMock

import pytest

import sceneid.api
import sceneid.transport
from sceneid.api import SceneID
from sceneid.errors import AuthenticationError
from sceneid.oauth import SceneIDOAuth


@pytest.fixture()
def api(oauth: SceneIDOAuth) -> SceneID:
    return SceneID(oauth)


def test_user_by_id(api, transport, store) -> None:
    store.set("accessToken", "AT")
    transport.queue({"success": True, "user": {"id": 1, "display_name": "gargaj"}})

    result = api.user(1)

    assert result == {"success": True, "user": {"id": 1, "display_name": "gargaj"}}
    (call,) = transport.calls
    assert call["url"] == "https://id.scene.org/3/api/3.0/user/"
    assert call["params"] == {"id": 1, "format": "json"}
    assert call["headers"]["Authorization"] == "Bearer AT"


def test_user_id_is_coerced_to_int(api, transport, store) -> None:
    store.set("accessToken", "AT")
    transport.queue({"success": True})
    api.user("42")
    assert transport.calls[0]["params"]["id"] == 42
    with pytest.raises(ValueError):
        api.user("42; drop")


def test_me_refreshes_expired_token(api, transport, store) -> None:
    store.set("accessToken", "expiredT")
    store.set("refreshToken", "RT")
    transport.queue(
        {"error": "invalid_token"},
        {"access_token": "freshT", "refresh_token": "RT2"},
        {"success": True, "user": {"id": 7}},
    )

    assert api.me() == {"success": True, "user": {"id": 7}}
    assert transport.calls[0]["url"].endswith("/me/")
    assert transport.calls[2]["url"].endswith("/me/")
    assert store.get("refreshToken") == "RT2"


def test_xml_format_not_implemented(api, transport, store, oauth) -> None:
    store.set("accessToken", "AT")
    oauth.set_format("xml")
    transport.queue("<user id='1'/>")
    with pytest.raises(NotImplementedError):
        api.user(1)
    assert transport.calls[0]["params"]["format"] == "xml"


def test_reset_forces_reauthentication(api, transport, store) -> None:
    store.set("accessToken", "AT")
    store.set("refreshToken", "RT")

    api.reset()

    with pytest.raises(AuthenticationError, match="not authenticated"):
        api.me()
    with pytest.raises(AuthenticationError, match="not authenticated"):
        api.user(1)
    assert transport.calls == []


def test_works_with_any_requester() -> None:
    requester = MagicMock()
    requester.resource_url = "https://api.example.test/v3/"
    requester.resource_request_refresh.return_value = '{"ok": 1}'
    requester.unpack_format.return_value = {"ok": 1}

    assert SceneID(requester).me() == {"ok": 1}
    requester.resource_request_refresh.assert_called_once_with("https://api.example.test/v3/me/", "GET", None)


def test_create_builds_oauth_client(transport) -> None:
    api = SceneID.create("cid", "csec", "https://cb", transport=transport, scope="basic")
    assert isinstance(api.oauth, SceneIDOAuth)
    assert api.oauth.config.scope == ("basic",)


@pytest.mark.parametrize("module", [sceneid.api, sceneid.transport])
def test_mapping_annotations_use_collections_abc(module) -> None:
    assert module.Mapping is collections.abc.Mapping
