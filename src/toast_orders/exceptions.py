"""Domain-specific exceptions for the Toast orders service.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from ToastAPIError for easy catching.
"""

from __future__ import annotations

from typing import Any


class ToastAPIError(Exception):
    """Base exception for all Toast orders errors.

    This is the base class for all domain-specific exceptions in the package.
    Users can catch this exception to handle any Toast orders error.
    """

    pass


class ConfigError(ToastAPIError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - TOAST_HOSTNAME is not set
    - No restaurant GUID is configured or passed with the request
    - Client credentials are missing when a token is requested
    """

    pass


class ValidationError(ToastAPIError):
    """Raised when a request is missing required parameters.

    This exception is raised when:
    - startDate or endDate query params are missing
    - A numeric query param cannot be parsed
    """

    pass


class UpstreamAuthError(ToastAPIError):
    """Raised when the Toast authentication call fails.

    This exception is raised when:
    - The login endpoint returns a non-2xx status
    - The login response has no accessToken
    """

    pass


class UpstreamCallError(ToastAPIError):
    """Raised when a Toast API call returns a non-success status.

    The upstream status code and parsed body are kept so they can be
    forwarded verbatim to the caller.

    Attributes:
        status_code: HTTP status returned by Toast.
        detail: Parsed JSON body (or ``{"raw": text}`` for non-JSON bodies).
        page: Page number being fetched when the call failed, if paginating.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        detail: Any = None,
        page: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail
        self.page = page
