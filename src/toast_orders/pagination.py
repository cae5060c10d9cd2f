"""Page-by-page traversal of ordersBulk with running totals.

The driver walks pages 1..max_pages strictly in sequence. Each page ends in
one of these transitions:

- non-success status -> UpstreamCallError is raised (totals so far are discarded)
- only order ID strings -> IDS_ONLY terminal, zero totals
- empty orders array -> EMPTY_PAGE terminal, totals from prior pages
- orders -> aggregated and merged, then the next page is fetched

Reaching max_pages without an empty page ends in EXHAUSTED. A short page is
not trusted as the last one: Toast's last-page size is not reliable, so
exhaustion is only confirmed by an explicit empty page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from toast_orders.aggregate import CheckRow, RunningTotals, aggregate_page
from toast_orders.client import PageFetcher
from toast_orders.config import DEFAULT_MAX_PAGES, DEFAULT_PAGE_SIZE
from toast_orders.exceptions import UpstreamCallError
from toast_orders.extract import OrdersKind, classify_orders

logger = logging.getLogger(__name__)


class PaginationState(str, Enum):
    FETCHING = "fetching"
    IDS_ONLY = "ids_only"
    EMPTY_PAGE = "empty_page"
    EXHAUSTED = "exhausted"


@dataclass
class PaginationResult:
    """Outcome of one pagination run.

    Attributes:
        state: Terminal state (IDS_ONLY, EMPTY_PAGE or EXHAUSTED).
        totals: Accumulated totals. Zeroed when state is IDS_ONLY.
        rows: Per-check rows, when rows were requested.
        page_size: Page size requested.
        max_pages: Page cap.
        pages_fetched: Number of upstream calls made.
        page: Page that ended the run.
        last_page_order_count: Length of the last extracted orders array.
        orders_seen: Object orders seen across pages.
        orders_matched: Orders that passed the business-date filter.
        id_count: Number of IDs on the terminating page (IDS_ONLY only).
        sample_ids: First IDs on the terminating page (IDS_ONLY only).
    """

    state: PaginationState
    totals: RunningTotals = field(default_factory=RunningTotals)
    rows: list[CheckRow] = field(default_factory=list)
    page_size: int = DEFAULT_PAGE_SIZE
    max_pages: int = DEFAULT_MAX_PAGES
    pages_fetched: int = 0
    page: int = 0
    last_page_order_count: int = 0
    orders_seen: int = 0
    orders_matched: int = 0
    id_count: int = 0
    sample_ids: list[str] = field(default_factory=list)

    @property
    def ids_only(self) -> bool:
        return self.state is PaginationState.IDS_ONLY

    def pagination_debug(self) -> dict[str, Any]:
        return {
            "pageSize": self.page_size,
            "maxPages": self.max_pages,
            "pagesFetched": self.pages_fetched,
            "lastPageOrderCount": self.last_page_order_count,
            "idsOnlyDetected": self.ids_only,
            "terminalState": self.state.value,
        }

    def filtering_debug(self) -> dict[str, int]:
        return {
            "totalOrdersSeen": self.orders_seen,
            "totalOrdersMatchedBusinessDate": self.orders_matched,
            "totalOrdersFilteredOut": self.orders_seen - self.orders_matched,
        }


def paginate_orders(
    fetch_page: PageFetcher,
    *,
    page_size: int = DEFAULT_PAGE_SIZE,
    max_pages: int = DEFAULT_MAX_PAGES,
    target_business_date: int | None = None,
    min_payment_count: int = 0,
    include_selection_discounts: bool = False,
    collect_rows: bool = False,
) -> PaginationResult:
    """Fetch ordersBulk pages until an empty page, IDs-only page or max_pages.

    Args:
        fetch_page: ``fetch_page(page, page_size) -> BulkPage``.
        page_size: Orders requested per page.
        max_pages: Upper bound on pages fetched.
        target_business_date: Passed to aggregate_page.
        min_payment_count: Passed to aggregate_page.
        include_selection_discounts: Passed to aggregate_page.
        collect_rows: Passed to aggregate_page.

    Returns:
        PaginationResult describing how traversal ended.

    Raises:
        UpstreamCallError: If any page returns a non-success status.
    """
    totals = RunningTotals()
    rows: list[CheckRow] = []
    result = PaginationResult(
        state=PaginationState.FETCHING, page_size=page_size, max_pages=max_pages
    )

    for page in range(1, max_pages + 1):
        bulk = fetch_page(page, page_size)
        result.pages_fetched += 1
        result.page = page

        if not bulk.ok:
            logger.warning("ordersBulk page %d failed with HTTP %s", page, bulk.status_code)
            raise UpstreamCallError(
                "Toast ordersBulk failed",
                status_code=bulk.status_code,
                detail=bulk.payload,
                page=page,
            )

        extracted = classify_orders(bulk.payload)
        result.last_page_order_count = len(extracted)

        if extracted.kind is OrdersKind.IDENTIFIERS_ONLY:
            logger.warning(
                "ordersBulk page %d returned %d order IDs only; aggregation aborted",
                page,
                len(extracted),
            )
            result.state = PaginationState.IDS_ONLY
            result.id_count = len(extracted)
            result.sample_ids = extracted.sample_ids()
            return result

        if extracted.kind is OrdersKind.EMPTY:
            logger.info("ordersBulk page %d empty; %d pages fetched", page, result.pages_fetched)
            result.state = PaginationState.EMPTY_PAGE
            break

        aggregated = aggregate_page(
            extracted.items,
            target_business_date=target_business_date,
            min_payment_count=min_payment_count,
            include_selection_discounts=include_selection_discounts,
            collect_rows=collect_rows,
        )
        totals.merge(aggregated.totals)
        rows.extend(aggregated.rows)
        result.orders_seen += aggregated.orders_seen
        result.orders_matched += aggregated.orders_matched
        logger.info("ordersBulk page %d: %d orders", page, len(extracted))
    else:
        logger.warning("Stopped after max_pages=%d without reaching an empty page", max_pages)
        result.state = PaginationState.EXHAUSTED

    result.totals = totals
    result.rows = rows
    return result
