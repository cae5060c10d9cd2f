"""Toast orders aggregation - bulk order totals from the Toast POS API.

This package pages through Toast's ordersBulk endpoint for a date range and
aggregates gross sales, net sales, tax and discounts at the
order/check/payment level:

- **Dates**: `toast_orders.dates` - normalize timestamps to Toast's wire format
- **Extraction**: `toast_orders.extract` - find orders in varying response shapes
- **Metrics**: `toast_orders.metrics` - per-check gross/net/tax/discounts
- **Aggregation**: `toast_orders.aggregate` - page totals and check rows
- **Pagination**: `toast_orders.pagination` - page loop and terminal states
- **HTTP**: `toast_orders.server` - FastAPI endpoints

Quick Start:
    >>> from toast_orders import ToastConfig
    >>> from toast_orders.api import get_order_totals
    >>> from toast_orders.client import make_session
    >>>
    >>> config = ToastConfig.from_env()
    >>> run = get_order_totals(
    ...     make_session(config.timeout),
    ...     config,
    ...     "2026-01-09T00:00:00.000Z",
    ...     "2026-01-10T00:00:00.000Z",
    ... )
    >>> print(run.result.totals.as_dict())
"""

__version__ = "0.1.0"

from toast_orders.config import ToastConfig
from toast_orders.exceptions import (
    ConfigError,
    ToastAPIError,
    UpstreamAuthError,
    UpstreamCallError,
    ValidationError,
)

__all__ = [
    "ConfigError",
    "ToastAPIError",
    "ToastConfig",
    "UpstreamAuthError",
    "UpstreamCallError",
    "ValidationError",
    "__version__",
]
