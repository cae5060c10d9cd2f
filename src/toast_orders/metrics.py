"""Check-level metrics.

Definitions (from the Toast order payload):
- gross_sales: sum of CAPTURED payment ``amount`` on the check
- net_sales: check ``amount``
- tax: check ``taxAmount``
- discount_amount: sum of applied discounts on the check (optionally also
  on each line-item selection)

Gross and net sales are independently sourced; neither is derived from the
other.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

CAPTURED = "CAPTURED"

# Tried in order; the first field present with a non-null value wins.
DISCOUNT_AMOUNT_FIELDS: tuple[str, ...] = (
    "discountAmount",
    "amount",
    "appliedDiscountAmount",
)


def to_number(value: Any) -> float:
    """Coerce an upstream numeric field to a finite float.

    Missing, non-numeric and non-finite values become 0.0 so one bad field
    never turns a total into NaN or raises.

    Examples:
        >>> to_number("25.50")
        25.5
        >>> to_number(None)
        0.0
        >>> to_number("abc")
        0.0
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    elif isinstance(value, str):
        text = value.strip()
        # digit separators ("1_000") are not numbers upstream
        if not text or "_" in text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def discount_amount(discount: Any) -> float:
    """Amount of one applied discount, using DISCOUNT_AMOUNT_FIELDS."""
    if not isinstance(discount, Mapping):
        return 0.0
    for name in DISCOUNT_AMOUNT_FIELDS:
        if discount.get(name) is not None:
            return to_number(discount[name])
    return 0.0


def sum_discounts(discounts: Any) -> float:
    """Sum a list of applied discounts; anything but a list sums to 0."""
    return sum((discount_amount(d) for d in _as_list(discounts)), 0.0)


@dataclass(frozen=True)
class CheckMetrics:
    """Financial metrics for a single check."""

    gross_sales: float = 0.0
    net_sales: float = 0.0
    tax: float = 0.0
    discount_amount: float = 0.0
    discount_count: int = 0
    payment_count: int = 0
    captured_payment_count: int = 0


def compute_check_metrics(
    check: Any,
    *,
    include_selection_discounts: bool = False,
) -> CheckMetrics:
    """Compute metrics for one check record.

    Args:
        check: A check object from an order's ``checks`` list. Anything that
            is not a mapping yields all-zero metrics.
        include_selection_discounts: Also add ``appliedDiscounts`` found on
            each entry of the check's ``selections``.

    Returns:
        CheckMetrics for the check.
    """
    if not isinstance(check, Mapping):
        return CheckMetrics()

    payments = _as_list(check.get("payments"))
    captured = [
        p for p in payments if isinstance(p, Mapping) and p.get("paymentStatus") == CAPTURED
    ]
    gross_sales = sum((to_number(p.get("amount")) for p in captured), 0.0)

    applied = _as_list(check.get("appliedDiscounts"))
    discounts = sum_discounts(applied)
    if include_selection_discounts:
        for selection in _as_list(check.get("selections")):
            if isinstance(selection, Mapping):
                discounts += sum_discounts(selection.get("appliedDiscounts"))

    return CheckMetrics(
        gross_sales=gross_sales,
        net_sales=to_number(check.get("amount")),
        tax=to_number(check.get("taxAmount")),
        discount_amount=discounts,
        discount_count=len(applied),
        payment_count=len(payments),
        captured_payment_count=len(captured),
    )
