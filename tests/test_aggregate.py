"""Tests for page aggregation: filters, skipped elements, totals and rows."""

import pytest

from toast_orders.aggregate import RunningTotals, aggregate_page
from toast_orders.metrics import CheckMetrics


@pytest.fixture
def page(order_factory):
    make_order, make_check, make_payment = order_factory
    return [
        make_order(
            20260109,
            [
                make_check(20.0, 2.0, [make_payment(22.0)], displayNumber="11"),
                make_check(5.0, 0.5, [], displayNumber="12"),
            ],
            display_number="1",
        ),
        make_order(
            20260110,
            [make_check(8.0, 0.8, [make_payment(8.8), make_payment(3.0, "VOIDED")])],
            display_number="2",
        ),
        "bare-order-guid",
        None,
    ]


def test_totals_without_filters(page) -> None:
    result = aggregate_page(page)
    totals = result.totals
    assert totals.order_count == 2
    assert totals.check_count == 3
    assert totals.total_net_sales == pytest.approx(33.0)
    assert totals.total_tax == pytest.approx(3.3)
    assert totals.total_gross_sales == pytest.approx(30.8)
    assert totals.captured_payment_count == 2
    assert result.orders_seen == 2
    assert result.rows == []


def test_business_date_match_includes_order(page) -> None:
    result = aggregate_page(page, target_business_date=20260109)
    assert result.totals.order_count == 1
    assert result.totals.check_count == 2
    assert result.orders_seen == 2
    assert result.orders_matched == 1


def test_business_date_mismatch_excludes_without_error(order_factory) -> None:
    make_order, make_check, make_payment = order_factory
    orders = [make_order(20260109, [make_check(10.0, 1.0, [make_payment(11.0)])])]
    result = aggregate_page(orders, target_business_date=20260110)
    assert result.totals == RunningTotals()
    assert result.orders_seen == 1
    assert result.orders_matched == 0


def test_business_date_string_matches(order_factory) -> None:
    make_order, make_check, _ = order_factory
    result = aggregate_page([make_order("20260109", [make_check()])], target_business_date=20260109)
    assert result.orders_matched == 1


def test_min_payment_count_drops_unpaid_checks(page) -> None:
    result = aggregate_page(
        page, target_business_date=20260109, min_payment_count=1, collect_rows=True
    )
    assert result.totals.check_count == 1
    assert result.totals.total_net_sales == 20.0
    assert [row.check_display_number for row in result.rows] == ["11"]


def test_rows_carry_identifying_fields(order_factory) -> None:
    make_order, make_check, make_payment = order_factory
    order = make_order(
        20260109,
        [make_check(10.0, 1.0, [make_payment(11.0)], guid="chk-9", tabName="Bar")],
        display_number="42",
        paidDate="2026-01-09T20:00:00.000+0000",
        revenueCenter={"guid": "rc-1"},
    )
    [row] = aggregate_page([order], collect_rows=True).rows
    data = row.as_dict()
    assert data["businessDate"] == 20260109
    assert data["orderGuid"] == "order-42"
    assert data["orderDisplayNumber"] == "42"
    assert data["checkGuid"] == "chk-9"
    assert data["checkDisplayNumber"] == "1"
    assert data["tabName"] == "Bar"
    assert data["revenueCenterGuid"] == "rc-1"
    assert data["paidDate"] == "2026-01-09T20:00:00.000+0000"
    assert data["grossSales"] == 11.0
    assert data["capturedPaymentCount"] == 1


def test_malformed_checks_are_skipped(order_factory) -> None:
    make_order, make_check, _ = order_factory
    orders = [
        make_order(20260109, ["check-guid", None, make_check(4.0, 0.4)]),
        make_order(20260109, checks=None) | {"checks": "nope"},
    ]
    result = aggregate_page(orders)
    assert result.totals.order_count == 2
    assert result.totals.check_count == 1
    assert result.totals.total_net_sales == 4.0


def test_only_strings_contribute_nothing() -> None:
    result = aggregate_page(["a", "b"])
    assert result.totals == RunningTotals()
    assert result.orders_seen == 0


def test_running_totals_merge_and_render() -> None:
    totals = RunningTotals()
    totals.add_check(
        CheckMetrics(gross_sales=10.0, net_sales=9.0, tax=1.0, captured_payment_count=1)
    )
    other = RunningTotals(total_gross_sales=5.0, order_count=2, check_count=1)
    totals.merge(other)
    assert totals.as_dict() == {
        "totalGrossSales": 15.0,
        "totalNetSales": 9.0,
        "totalTax": 1.0,
        "totalDiscountAmount": 0.0,
        "orderCount": 2,
        "checkCount": 2,
        "capturedPaymentCount": 1,
    }
