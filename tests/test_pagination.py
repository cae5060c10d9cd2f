"""Tests for the ordersBulk pagination driver and its terminal states."""

import pytest

from toast_orders.client import BulkPage
from toast_orders.exceptions import UpstreamCallError
from toast_orders.pagination import PaginationState, paginate_orders


class ScriptedFetcher:
    """Serves a fixed list of payloads by page number and records calls."""

    def __init__(self, payloads, statuses=None):
        self.payloads = payloads
        self.statuses = statuses or {}
        self.calls: list[tuple[int, int]] = []

    def __call__(self, page: int, page_size: int) -> BulkPage:
        self.calls.append((page, page_size))
        payload = self.payloads[page - 1] if page <= len(self.payloads) else []
        return BulkPage(
            page=page,
            status_code=self.statuses.get(page, 200),
            payload=payload,
            url=f"https://toast.example.com/orders/v2/ordersBulk?page={page}",
        )


@pytest.fixture
def two_order_page(order_factory):
    make_order, make_check, make_payment = order_factory
    return [
        make_order(20260109, [make_check(10.0, 1.0, [make_payment(11.0)])], display_number="1"),
        make_order(20260109, [make_check(20.0, 2.0, [make_payment(22.0)])], display_number="2"),
    ]


def test_full_pages_then_empty_page(two_order_page) -> None:
    """pageSize=2: two full pages plus one confirming empty fetch."""
    fetch = ScriptedFetcher([two_order_page, two_order_page, []])
    result = paginate_orders(fetch, page_size=2)

    assert fetch.calls == [(1, 2), (2, 2), (3, 2)]
    assert result.state is PaginationState.EMPTY_PAGE
    assert result.pages_fetched == 3
    assert result.last_page_order_count == 0
    assert result.totals.order_count == 4
    assert result.totals.total_gross_sales == pytest.approx(66.0)


def test_short_page_is_not_trusted_as_last(two_order_page) -> None:
    fetch = ScriptedFetcher([two_order_page[:1]])
    result = paginate_orders(fetch, page_size=2)
    assert len(fetch.calls) == 2
    assert result.state is PaginationState.EMPTY_PAGE
    assert result.totals.order_count == 1


def test_empty_page_keeps_prior_totals(two_order_page) -> None:
    one_page = paginate_orders(ScriptedFetcher([two_order_page]), page_size=2)
    with_wrapper = paginate_orders(
        ScriptedFetcher([two_order_page, {"orders": []}]), page_size=2
    )
    assert one_page.totals == with_wrapper.totals
    assert with_wrapper.state is PaginationState.EMPTY_PAGE


def test_ids_only_discards_prior_totals(two_order_page) -> None:
    ids = [f"guid-{i}" for i in range(12)]
    fetch = ScriptedFetcher([two_order_page, {"orderIds": ids}])
    result = paginate_orders(fetch, page_size=2, collect_rows=True)

    assert result.state is PaginationState.IDS_ONLY
    assert result.ids_only
    assert result.page == 2
    assert result.id_count == 12
    assert result.sample_ids == ids[:10]
    assert result.totals.as_dict()["totalGrossSales"] == 0
    assert result.totals.order_count == 0
    assert result.rows == []
    assert len(fetch.calls) == 2


def test_upstream_error_is_fatal(two_order_page) -> None:
    fetch = ScriptedFetcher(
        [two_order_page, {"message": "bad date"}], statuses={2: 400}
    )
    with pytest.raises(UpstreamCallError) as excinfo:
        paginate_orders(fetch, page_size=2)

    err = excinfo.value
    assert err.status_code == 400
    assert err.detail == {"message": "bad date"}
    assert err.page == 2
    assert len(fetch.calls) == 2


def test_max_pages_exhausted(two_order_page) -> None:
    fetch = ScriptedFetcher([two_order_page] * 10)
    result = paginate_orders(fetch, page_size=2, max_pages=3)
    assert result.state is PaginationState.EXHAUSTED
    assert len(fetch.calls) == 3
    assert result.totals.order_count == 6


def test_filters_and_rows_across_pages(order_factory) -> None:
    make_order, make_check, make_payment = order_factory
    page1 = [
        make_order(20260109, [make_check(10.0, 1.0, [make_payment(11.0)])]),
        make_order(20260108, [make_check(99.0, 9.0, [make_payment(108.0)])]),
    ]
    page2 = [make_order(20260109, [make_check(5.0, 0.5, [])])]
    result = paginate_orders(
        ScriptedFetcher([page1, page2]),
        page_size=2,
        target_business_date=20260109,
        min_payment_count=1,
        collect_rows=True,
    )
    assert result.orders_seen == 3
    assert result.orders_matched == 2
    assert len(result.rows) == 1
    assert result.totals.check_count == 1
    assert result.filtering_debug() == {
        "totalOrdersSeen": 3,
        "totalOrdersMatchedBusinessDate": 2,
        "totalOrdersFilteredOut": 1,
    }
    assert result.pagination_debug()["terminalState"] == "empty_page"


def test_rerun_is_identical(two_order_page) -> None:
    payloads = [two_order_page, two_order_page[:1], []]
    first = paginate_orders(ScriptedFetcher(payloads), page_size=2)
    second = paginate_orders(ScriptedFetcher(payloads), page_size=2)
    assert first.totals.as_dict() == second.totals.as_dict()
