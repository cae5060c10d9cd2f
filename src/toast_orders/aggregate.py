"""Aggregate orders from one ordersBulk page into totals and check rows.

Orders arriving as bare ID strings, and orders or checks that are not JSON
objects, are skipped without incrementing any counter.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields
from typing import Any

from toast_orders.dates import parse_business_date
from toast_orders.metrics import CheckMetrics, compute_check_metrics, to_number

logger = logging.getLogger(__name__)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


@dataclass
class RunningTotals:
    """Summed metrics and counts for one request.

    Lives only for the duration of a request and is never persisted.
    """

    total_gross_sales: float = 0.0
    total_net_sales: float = 0.0
    total_tax: float = 0.0
    total_discount_amount: float = 0.0
    order_count: int = 0
    check_count: int = 0
    captured_payment_count: int = 0

    def add_check(self, metrics: CheckMetrics) -> None:
        """Add one included check's metrics."""
        self.total_gross_sales += metrics.gross_sales
        self.total_net_sales += metrics.net_sales
        self.total_tax += metrics.tax
        self.total_discount_amount += metrics.discount_amount
        self.check_count += 1
        self.captured_payment_count += metrics.captured_payment_count

    def merge(self, other: RunningTotals) -> None:
        """Fold a page's totals into these totals in place."""
        for f in fields(self):
            setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))

    def as_dict(self) -> dict[str, float | int]:
        """Render with the camelCase keys used in API responses."""
        return {_camel(f.name): getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class CheckRow:
    """One check with the identifying fields of its order."""

    business_date: int | None
    order_guid: str | None
    order_display_number: Any
    paid_date: str | None
    revenue_center_guid: str | None
    check_guid: str | None
    check_display_number: Any
    tab_name: str | None
    gross_sales: float
    net_sales: float
    tax: float
    discount_amount: float
    discount_count: int
    payment_count: int
    captured_payment_count: int

    @classmethod
    def from_records(
        cls,
        order: Mapping[str, Any],
        check: Mapping[str, Any],
        metrics: CheckMetrics,
    ) -> CheckRow:
        revenue_center = order.get("revenueCenter")
        return cls(
            business_date=parse_business_date(order.get("businessDate")),
            order_guid=order.get("guid"),
            order_display_number=order.get("displayNumber"),
            paid_date=order.get("paidDate"),
            revenue_center_guid=(
                revenue_center.get("guid") if isinstance(revenue_center, Mapping) else None
            ),
            check_guid=check.get("guid"),
            check_display_number=check.get("displayNumber"),
            tab_name=check.get("tabName"),
            gross_sales=metrics.gross_sales,
            net_sales=metrics.net_sales,
            tax=metrics.tax,
            discount_amount=metrics.discount_amount,
            discount_count=metrics.discount_count,
            payment_count=metrics.payment_count,
            captured_payment_count=metrics.captured_payment_count,
        )

    def as_dict(self) -> dict[str, Any]:
        return {_camel(f.name): getattr(self, f.name) for f in fields(self)}


@dataclass
class PageAggregate:
    """Result of aggregating one page of orders.

    Attributes:
        totals: Totals over included orders and checks.
        rows: Per-check rows (only filled when rows were requested).
        orders_seen: Orders on the page that were JSON objects.
        orders_matched: Of those, orders that passed the business-date filter.
    """

    totals: RunningTotals = field(default_factory=RunningTotals)
    rows: list[CheckRow] = field(default_factory=list)
    orders_seen: int = 0
    orders_matched: int = 0


def matches_business_date(order: Mapping[str, Any], target: int | None) -> bool:
    """True when no target is set or the order's businessDate equals it exactly."""
    if target is None:
        return True
    return to_number(order.get("businessDate")) == target


def aggregate_page(
    orders: Iterable[Any],
    *,
    target_business_date: int | None = None,
    min_payment_count: int = 0,
    include_selection_discounts: bool = False,
    collect_rows: bool = False,
) -> PageAggregate:
    """Sum check metrics across all checks of all orders on a page.

    Args:
        orders: Elements of the extracted orders array.
        target_business_date: Only include orders whose businessDate equals
            this YYYYMMDD integer. None includes every order.
        min_payment_count: Exclude checks with fewer payments than this.
            Production uses 1 for check listings (drops checks with no payments).
        include_selection_discounts: Also count selection-level discounts.
        collect_rows: Build a CheckRow for every included check.

    Returns:
        PageAggregate with totals, optional rows and filtering counts.
    """
    result = PageAggregate()

    for order in orders:
        if not isinstance(order, Mapping):
            continue
        result.orders_seen += 1

        if not matches_business_date(order, target_business_date):
            continue
        result.orders_matched += 1
        result.totals.order_count += 1

        checks = order.get("checks")
        for check in checks if isinstance(checks, list) else []:
            if not isinstance(check, Mapping):
                continue

            metrics = compute_check_metrics(
                check, include_selection_discounts=include_selection_discounts
            )
            if metrics.payment_count < min_payment_count:
                continue

            result.totals.add_check(metrics)
            if collect_rows:
                result.rows.append(CheckRow.from_records(order, check, metrics))

    logger.debug(
        "Aggregated page: %d orders seen, %d matched, %d checks",
        result.orders_seen,
        result.orders_matched,
        result.totals.check_count,
    )
    return result
