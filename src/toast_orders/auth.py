"""Toast machine-client authentication.

The bearer token is treated as an opaque string. It is requested once per
inbound request; there is no caching or refresh.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

import requests

from toast_orders.client import is_success, parse_body
from toast_orders.config import ToastConfig
from toast_orders.exceptions import ConfigError, UpstreamAuthError

logger = logging.getLogger(__name__)

LOGIN_PATH = "/authentication/v1/authentication/login"
USER_ACCESS_TYPE = "TOAST_MACHINE_CLIENT"


def get_access_token(session: requests.Session, config: ToastConfig) -> str:
    """Exchange client credentials for an access token.

    Args:
        session: HTTP session.
        config: Toast configuration with hostname, client id and secret.

    Returns:
        The access token string.

    Raises:
        ConfigError: If hostname or client credentials are missing.
        UpstreamAuthError: If the login call fails or returns no accessToken.
    """
    if not config.hostname or not config.client_id or not config.client_secret:
        raise ConfigError("Missing TOAST_HOSTNAME / TOAST_CLIENT_ID / TOAST_CLIENT_SECRET")

    resp = session.post(
        f"{config.base_url}{LOGIN_PATH}",
        json={
            "clientId": config.client_id,
            "clientSecret": config.client_secret,
            "userAccessType": USER_ACCESS_TYPE,
        },
    )
    if not is_success(resp.status_code):
        raise UpstreamAuthError(f"Toast auth failed: {resp.status_code} {resp.text}")

    data = parse_body(resp.text)
    token = data.get("token") if isinstance(data, Mapping) else None
    access_token = token.get("accessToken") if isinstance(token, Mapping) else None
    if not access_token:
        raise UpstreamAuthError("Toast auth response missing accessToken")

    logger.debug("Acquired Toast access token")
    return str(access_token)
