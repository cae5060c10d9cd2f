"""Public API for Toast order aggregation.

This module provides the main entry points used by the HTTP handlers and
the command line: each one validates inputs, normalizes dates, acquires a
token and runs the pagination driver (or a single page fetch).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from toast_orders.aggregate import PageAggregate, aggregate_page
from toast_orders.auth import get_access_token
from toast_orders.client import BulkPage, OrdersBulkClient
from toast_orders.dates import normalize_toast_date
from toast_orders.exceptions import UpstreamCallError, ValidationError
from toast_orders.extract import ExtractedOrders, classify_orders
from toast_orders.pagination import PaginationResult, paginate_orders

if TYPE_CHECKING:
    import requests

    from toast_orders.config import ToastConfig

logger = logging.getLogger(__name__)

# Fixed target used by the check listing until a business-date picker exists.
DEFAULT_TARGET_BUSINESS_DATE = 20260109

# Checks with no payments at all are excluded from check listings.
CHECKS_MIN_PAYMENT_COUNT = 1

BULK_DEFAULT_PAGE_SIZE = 10


@dataclass
class OrdersRequest:
    """Inputs shared by every order aggregation entry point."""

    start_date: str
    end_date: str
    normalized_start_date: str
    normalized_end_date: str
    restaurant_guid: str

    def dates(self) -> dict[str, str]:
        return {
            "startDate": self.start_date,
            "endDate": self.end_date,
            "normalizedStartDate": self.normalized_start_date,
            "normalizedEndDate": self.normalized_end_date,
        }


@dataclass
class OrdersRun:
    """A completed pagination run plus the request that produced it."""

    request: OrdersRequest
    result: PaginationResult
    first_page_url: str
    target_business_date: int | None = None


@dataclass
class OrdersPage:
    """A single ordersBulk page fetched without pagination."""

    request: OrdersRequest
    bulk: BulkPage
    orders: ExtractedOrders
    aggregate: PageAggregate = field(default_factory=PageAggregate)


def prepare_request(
    config: ToastConfig,
    start_date: str | None,
    end_date: str | None,
    restaurant_guid: str | None = None,
) -> OrdersRequest:
    """Validate configuration and inputs, then normalize the dates.

    Raises:
        ConfigError: If TOAST_HOSTNAME or a restaurant GUID is missing.
        ValidationError: If either date is missing.
    """
    config.require_hostname()
    guid = config.resolve_restaurant_guid(restaurant_guid)
    if not start_date or not end_date:
        raise ValidationError("Missing startDate or endDate query params")

    return OrdersRequest(
        start_date=start_date,
        end_date=end_date,
        normalized_start_date=normalize_toast_date(start_date),
        normalized_end_date=normalize_toast_date(end_date),
        restaurant_guid=guid,
    )


def _validate_paging(page_size: int, max_pages: int) -> None:
    if page_size < 1:
        raise ValidationError(f"pageSize must be a positive integer, got {page_size}")
    if max_pages < 1:
        raise ValidationError(f"maxPages must be a positive integer, got {max_pages}")


def run_orders(
    session: requests.Session,
    config: ToastConfig,
    request: OrdersRequest,
    *,
    page_size: int | None = None,
    max_pages: int | None = None,
    target_business_date: int | None = None,
    min_payment_count: int = 0,
    include_selection_discounts: bool = False,
    collect_rows: bool = False,
) -> OrdersRun:
    """Paginate ordersBulk for a prepared request.

    Args:
        session: HTTP session.
        config: Toast configuration.
        request: Output of prepare_request.
        page_size: Orders per page. Defaults to config.default_page_size.
        max_pages: Page cap. Defaults to config.default_max_pages.
        target_business_date: Only aggregate orders with this businessDate.
        min_payment_count: Exclude checks with fewer payments.
        include_selection_discounts: Count selection-level discounts too.
        collect_rows: Return per-check rows.

    Returns:
        OrdersRun with the pagination result.

    Raises:
        ValidationError: If page_size or max_pages is not positive.
        UpstreamAuthError: If the token cannot be acquired.
        UpstreamCallError: If any page fails.
    """
    page_size = config.default_page_size if page_size is None else page_size
    max_pages = config.default_max_pages if max_pages is None else max_pages
    _validate_paging(page_size, max_pages)

    token = get_access_token(session, config)
    client = OrdersBulkClient(session, config, token, request.restaurant_guid)

    logger.info(
        "Aggregating ordersBulk %s..%s (pageSize=%d, maxPages=%d, businessDate=%s)",
        request.normalized_start_date,
        request.normalized_end_date,
        page_size,
        max_pages,
        target_business_date,
    )
    result = paginate_orders(
        client.page_fetcher(request.normalized_start_date, request.normalized_end_date),
        page_size=page_size,
        max_pages=max_pages,
        target_business_date=target_business_date,
        min_payment_count=min_payment_count,
        include_selection_discounts=include_selection_discounts,
        collect_rows=collect_rows,
    )
    return OrdersRun(
        request=request,
        result=result,
        first_page_url=client.orders_bulk_url(
            request.normalized_start_date, request.normalized_end_date, 1, page_size
        ),
        target_business_date=target_business_date,
    )


def get_order_totals(
    session: requests.Session,
    config: ToastConfig,
    start_date: str | None,
    end_date: str | None,
    *,
    restaurant_guid: str | None = None,
    page_size: int | None = None,
    max_pages: int | None = None,
) -> OrdersRun:
    """Sum gross sales, net sales, tax and discounts over every order in range."""
    request = prepare_request(config, start_date, end_date, restaurant_guid)
    return run_orders(session, config, request, page_size=page_size, max_pages=max_pages)


def get_check_rows(
    session: requests.Session,
    config: ToastConfig,
    start_date: str | None,
    end_date: str | None,
    *,
    restaurant_guid: str | None = None,
    page_size: int | None = None,
    max_pages: int | None = None,
    business_date: int | None = None,
    include_selection_discounts: bool = False,
) -> OrdersRun:
    """List checks with at least one payment for a single business date.

    Args:
        business_date: YYYYMMDD to keep. Defaults to DEFAULT_TARGET_BUSINESS_DATE.
        include_selection_discounts: Add selection-level discounts to each check.
    """
    request = prepare_request(config, start_date, end_date, restaurant_guid)
    return run_orders(
        session,
        config,
        request,
        page_size=page_size,
        max_pages=max_pages,
        target_business_date=business_date or DEFAULT_TARGET_BUSINESS_DATE,
        min_payment_count=CHECKS_MIN_PAYMENT_COUNT,
        include_selection_discounts=include_selection_discounts,
        collect_rows=True,
    )


def get_orders_page(
    session: requests.Session,
    config: ToastConfig,
    start_date: str | None,
    end_date: str | None,
    *,
    restaurant_guid: str | None = None,
    page: int = 1,
    page_size: int = BULK_DEFAULT_PAGE_SIZE,
) -> OrdersPage:
    """Fetch and aggregate one ordersBulk page without following pagination.

    Unlike the paginated entry points, a failed page is returned rather
    than raised so callers can show the raw upstream response in debug mode.
    """
    request = prepare_request(config, start_date, end_date, restaurant_guid)
    if page < 1:
        raise ValidationError(f"page must be a positive integer, got {page}")
    _validate_paging(page_size, 1)

    token = get_access_token(session, config)
    client = OrdersBulkClient(session, config, token, request.restaurant_guid)
    bulk = client.fetch_page(
        request.normalized_start_date, request.normalized_end_date, page, page_size
    )
    orders = classify_orders(bulk.payload) if bulk.ok else ExtractedOrders.empty()
    aggregated = aggregate_page(orders.items, collect_rows=True)
    return OrdersPage(request=request, bulk=bulk, orders=orders, aggregate=aggregated)


def raise_for_page(page: OrdersPage) -> None:
    """Raise UpstreamCallError when a single fetched page failed."""
    if not page.bulk.ok:
        raise UpstreamCallError(
            "Toast ordersBulk failed",
            status_code=page.bulk.status_code,
            detail=page.bulk.payload,
            page=page.bulk.page,
        )


def ids_only_body(
    request: OrdersRequest, ids: list[str], id_count: int, page: int
) -> dict[str, Any]:
    """Response body for the IDs-only condition (a 200, not an error status)."""
    return {
        "error": "ordersBulk returned only order IDs (no order details to sum).",
        "orderIdCount": id_count,
        "sampleIds": ids,
        "page": page,
        "nextStep": (
            "Fetch order details for these IDs (ideally with a bulk details "
            "endpoint) and then aggregate the checks."
        ),
        "normalizedStartDate": request.normalized_start_date,
        "normalizedEndDate": request.normalized_end_date,
    }
