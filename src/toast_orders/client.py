"""HTTP client for the Toast orders and reporting APIs.

Every call goes through a requests Session with a default timeout and no
retry adapter. A failed page is terminal for the request that asked for it.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import requests

from toast_orders.config import DEFAULT_TIMEOUT, ToastConfig
from toast_orders.exceptions import UpstreamCallError

logger = logging.getLogger(__name__)

ORDERS_BULK_PATH = "/orders/v2/ordersBulk"
ERA_METRICS_PATH = "/era/v1/metrics"
RESTAURANT_HEADER = "Toast-Restaurant-External-ID"


def make_session(timeout: float = DEFAULT_TIMEOUT) -> requests.Session:
    """Create a requests Session with a default timeout.

    Args:
        timeout: Default timeout in seconds for all requests. Defaults to
            DEFAULT_TIMEOUT (60 seconds).

    Returns:
        Configured requests.Session object.
    """
    s = requests.Session()
    s.headers.update({"Accept": "application/json"})
    orig_request = s.request

    def timed_request(method: str, url: str, **kwargs: Any) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return orig_request(method, url, **kwargs)

    s.request = timed_request  # type: ignore[method-assign,assignment]
    return s


def parse_body(text: str | None) -> Any:
    """Parse a response body leniently.

    Returns None for an empty body and ``{"raw": text}`` when the body is
    not JSON, so error bodies can still be forwarded to the caller.
    """
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return {"raw": text}


def is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


@dataclass(frozen=True)
class BulkPage:
    """One ordersBulk response.

    Attributes:
        page: Page number requested.
        status_code: HTTP status returned by Toast.
        payload: Parsed body (see parse_body).
        url: Full URL requested, for debug output.
        empty_body: True when the response body was blank.
    """

    page: int
    status_code: int
    payload: Any
    url: str
    empty_body: bool = False

    @property
    def ok(self) -> bool:
        return is_success(self.status_code)


PageFetcher = Callable[[int, int], BulkPage]


class OrdersBulkClient:
    """Fetches ordersBulk pages for one restaurant with one bearer token."""

    def __init__(
        self,
        session: requests.Session,
        config: ToastConfig,
        token: str,
        restaurant_guid: str,
    ) -> None:
        self.session = session
        self.config = config
        self.token = token
        self.restaurant_guid = restaurant_guid

    def orders_bulk_url(self, start_date: str, end_date: str, page: int, page_size: int) -> str:
        query = urlencode(
            {
                "startDate": start_date,
                "endDate": end_date,
                "pageSize": page_size,
                "page": page,
            }
        )
        return f"{self.config.base_url}{ORDERS_BULK_PATH}?{query}"

    def fetch_page(self, start_date: str, end_date: str, page: int, page_size: int) -> BulkPage:
        """GET one page of ordersBulk.

        Non-success statuses are returned, not raised; the pagination driver
        decides what a failed page means.
        """
        url = self.orders_bulk_url(start_date, end_date, page, page_size)
        logger.debug("GET %s", url)
        resp = self.session.get(
            url,
            headers={
                "Authorization": f"Bearer {self.token}",
                RESTAURANT_HEADER: self.restaurant_guid,
            },
        )
        text = resp.text or ""
        return BulkPage(
            page=page,
            status_code=resp.status_code,
            payload=parse_body(text),
            url=url,
            empty_body=not text.strip(),
        )

    def page_fetcher(self, start_date: str, end_date: str) -> PageFetcher:
        """Bind a date range, returning ``fetch(page, page_size)`` for the driver."""

        def fetch(page: int, page_size: int) -> BulkPage:
            return self.fetch_page(start_date, end_date, page, page_size)

        return fetch


def fetch_revenue_center_metrics(
    session: requests.Session,
    config: ToastConfig,
    token: str,
    start: str,
    end: str,
) -> tuple[str, Any]:
    """Run an ERA metrics report grouped by revenue center.

    Toast answers the create call with a quoted report GUID which is then
    used to fetch the results.

    Args:
        session: HTTP session.
        config: Toast configuration.
        token: Bearer token.
        start: Start business date, YYYYMMDD.
        end: End business date, YYYYMMDD.

    Returns:
        (report_request_guid, report_data)

    Raises:
        UpstreamCallError: If either call returns a non-2xx status.
    """
    headers = {"Authorization": f"Bearer {token}"}
    create = session.post(
        f"{config.base_url}{ERA_METRICS_PATH}",
        headers=headers,
        json={
            "startBusinessDate": start,
            "endBusinessDate": end,
            "groupBy": ["REVENUE_CENTER"],
        },
    )
    if not is_success(create.status_code):
        raise UpstreamCallError(
            "Failed to create Toast metrics report",
            status_code=create.status_code,
            detail=parse_body(create.text),
        )

    report_guid = (create.text or "").replace('"', "").strip()
    logger.info("Created ERA metrics report %s for %s..%s", report_guid, start, end)

    data = session.get(f"{config.base_url}{ERA_METRICS_PATH}/{report_guid}", headers=headers)
    if not is_success(data.status_code):
        raise UpstreamCallError(
            "Failed to retrieve Toast metrics report",
            status_code=data.status_code,
            detail=parse_body(data.text),
        )
    return report_guid, parse_body(data.text)
