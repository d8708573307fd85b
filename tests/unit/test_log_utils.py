"""Unit tests for secret masking and grant-context log records."""

from __future__ import annotations

import logging

import pytest

from sceneid.errors import AuthenticationError
from sceneid.log_utils import grant_logger, mask_sensitive


@pytest.mark.parametrize(
    "value, keep, expected",
    [
        (None, 4, "<none>"),
        ("abc", 4, "***"),
        ("abcdefgh", 4, "abcd****"),
        ("myPortalClientID", 6, "myPort****"),
    ],
)
def test_mask_sensitive(value, keep, expected) -> None:
    assert mask_sensitive(value, keep) == expected


def test_grant_logger_injects_context(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="sceneid.oauth")
    grant_logger("myPortalClientID", "refresh_token").info("hello")

    (record,) = caplog.records
    assert record.client_id == "myPort****"
    assert record.grant_type == "refresh_token"
    assert not hasattr(record, "correlation_id")


def test_call_site_extra_overrides_context(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="sceneid.oauth")
    grant_logger("cid", "client_credentials").info("x", extra={"grant_type": "other"})
    assert caplog.records[0].grant_type == "other"


def test_token_request_records_carry_grant_context(oauth, transport, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="sceneid.oauth")
    transport.queue({"access_token": "AT-secret-value"})

    oauth.acquire_client_credentials_token()

    records = [r for r in caplog.records if getattr(r, "grant_type", None) == "client_credentials"]
    assert records
    assert records[0].client_id == "myPort****"
    assert "AT-secret-value" not in caplog.text
    assert "verySecretHashThing" not in caplog.text


def test_rejected_grant_logs_warning_with_context(oauth, transport, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="sceneid.oauth")
    oauth.store.set("refreshToken", "RT")
    transport.queue({"error": "invalid_grant"})

    with pytest.raises(AuthenticationError):
        oauth.refresh_token()

    (warning,) = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert warning.grant_type == "refresh_token"
    assert warning.client_id == "myPort****"
