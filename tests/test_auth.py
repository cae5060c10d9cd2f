"""Tests for Toast machine-client token acquisition."""

from dataclasses import replace

import pytest

from toast_orders.auth import USER_ACCESS_TYPE, get_access_token
from toast_orders.exceptions import ConfigError, UpstreamAuthError


def test_returns_access_token(toast_config, fake_session) -> None:
    session = fake_session(token="abc123")
    assert get_access_token(session, toast_config) == "abc123"
    call = session.calls[0]
    assert call["url"] == "https://toast.example.com/authentication/v1/authentication/login"
    assert call["json"] == {
        "clientId": "client-id",
        "clientSecret": "client-secret",
        "userAccessType": USER_ACCESS_TYPE,
    }


def test_missing_credentials(toast_config, fake_session) -> None:
    with pytest.raises(ConfigError):
        get_access_token(fake_session(), replace(toast_config, client_secret=None))


def test_login_failure(toast_config, fake_session, fake_response) -> None:
    session = fake_session(login=fake_response(401, text="bad credentials"))
    with pytest.raises(UpstreamAuthError, match="401"):
        get_access_token(session, toast_config)


def test_missing_access_token(toast_config, fake_session, fake_response) -> None:
    session = fake_session(login=fake_response(200, {"token": {"tokenType": "Bearer"}}))
    with pytest.raises(UpstreamAuthError, match="accessToken"):
        get_access_token(session, toast_config)
