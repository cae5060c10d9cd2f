"""Tabular views of aggregation results.

Per-check rows and totals are turned into pandas DataFrames so they can be
written to CSV or inspected alongside other POS marts.
"""

from __future__ import annotations

from collections.abc import Iterable

import pandas as pd

from toast_orders.aggregate import CheckRow, RunningTotals

CHECK_COLUMNS = [
    "businessDate",
    "orderGuid",
    "orderDisplayNumber",
    "paidDate",
    "revenueCenterGuid",
    "checkGuid",
    "checkDisplayNumber",
    "tabName",
    "grossSales",
    "netSales",
    "tax",
    "discountAmount",
    "discountCount",
    "paymentCount",
    "capturedPaymentCount",
]

TOTALS_COLUMNS = [
    "totalGrossSales",
    "totalNetSales",
    "totalTax",
    "totalDiscountAmount",
    "orderCount",
    "checkCount",
    "capturedPaymentCount",
]


def checks_frame(rows: Iterable[CheckRow]) -> pd.DataFrame:
    """One row per check, columns in CHECK_COLUMNS order.

    An empty input still yields the full set of columns.
    """
    return pd.DataFrame([row.as_dict() for row in rows], columns=CHECK_COLUMNS)


def totals_frame(totals: RunningTotals, **labels: str) -> pd.DataFrame:
    """Single-row frame of totals, prefixed with any label columns given.

    Examples:
        >>> totals_frame(RunningTotals(), restaurantGuid="abc").columns[0]
        'restaurantGuid'
    """
    record = {**labels, **totals.as_dict()}
    return pd.DataFrame([record], columns=[*labels, *TOTALS_COLUMNS])
