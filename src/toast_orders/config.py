"""Unified configuration for the Toast orders service.

This module provides a single configuration class built once at process
start and passed explicitly into the client, the pagination driver and the
HTTP app.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from toast_orders.exceptions import ConfigError

DEFAULT_TIMEOUT = 60.0
DEFAULT_PAGE_SIZE = 100
DEFAULT_MAX_PAGES = 50


@dataclass(frozen=True)
class ToastConfig:
    """Connection settings for the Toast API.

    Attributes:
        hostname: Toast API host, without scheme (e.g. ``ws-api.toasttab.com``).
        client_id: Machine client id used for token acquisition.
        client_secret: Machine client secret used for token acquisition.
        restaurant_guid: Default restaurant GUID when a request does not pass one.
        timeout: Default timeout in seconds applied to every upstream request.
        default_page_size: Page size requested from ordersBulk by default.
        default_max_pages: Maximum number of pages fetched per request by default.

    Environment:
        TOAST_HOSTNAME, TOAST_CLIENT_ID, TOAST_CLIENT_SECRET,
        TOAST_RESTAURANT_GUID, TOAST_TIMEOUT
    """

    hostname: str | None = None
    client_id: str | None = None
    client_secret: str | None = None
    restaurant_guid: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    default_page_size: int = DEFAULT_PAGE_SIZE
    default_max_pages: int = DEFAULT_MAX_PAGES

    @classmethod
    def from_env(cls) -> ToastConfig:
        """Create ToastConfig from TOAST_* environment variables.

        Missing values are left as None; they are only required when the
        operation that needs them runs.

        Returns:
            ToastConfig instance.

        Raises:
            ConfigError: If TOAST_TIMEOUT is set but not a number.

        Examples:
            >>> config = ToastConfig.from_env()
            >>> config.default_page_size
            100
        """
        raw_timeout = os.environ.get("TOAST_TIMEOUT")
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError as e:
            raise ConfigError(f"Invalid TOAST_TIMEOUT {raw_timeout!r}: {e}") from e

        return cls(
            hostname=os.environ.get("TOAST_HOSTNAME") or None,
            client_id=os.environ.get("TOAST_CLIENT_ID") or None,
            client_secret=os.environ.get("TOAST_CLIENT_SECRET") or None,
            restaurant_guid=os.environ.get("TOAST_RESTAURANT_GUID") or None,
            timeout=timeout,
        )

    def require_hostname(self) -> str:
        """Return the configured hostname or raise ConfigError."""
        if not self.hostname:
            raise ConfigError("Missing TOAST_HOSTNAME")
        return self.hostname

    def resolve_restaurant_guid(self, override: str | None = None) -> str:
        """Pick the restaurant GUID for a request.

        Args:
            override: GUID passed with the request; wins over the default.

        Returns:
            The restaurant GUID to send in the Toast-Restaurant-External-ID header.

        Raises:
            ConfigError: If neither an override nor TOAST_RESTAURANT_GUID is set.
        """
        guid = override or self.restaurant_guid
        if not guid:
            raise ConfigError("Missing TOAST_RESTAURANT_GUID (or pass restaurantGuid=...)")
        return guid

    @property
    def base_url(self) -> str:
        """HTTPS origin of the Toast API."""
        return f"https://{self.require_hostname()}"
