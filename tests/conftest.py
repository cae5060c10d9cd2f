"""Shared fixtures: fake Toast HTTP responses and sessions.

No test here talks to the network; the fake session answers the login,
ordersBulk and ERA metrics calls from canned responses.
"""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import parse_qs, urlparse

import pytest

from toast_orders.auth import LOGIN_PATH
from toast_orders.client import ORDERS_BULK_PATH
from toast_orders.config import ToastConfig


class FakeResponse:
    """Just enough of requests.Response for the client code."""

    def __init__(self, status_code: int = 200, body: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        if text is None:
            text = "" if body is None else json.dumps(body)
        self.text = text


class FakeSession:
    """Records calls and answers them from canned responses.

    ``pages`` holds one response per ordersBulk page (page 1 first). Pages
    past the end answer with an empty array.
    """

    def __init__(
        self,
        pages: list[FakeResponse] | None = None,
        *,
        token: str = "test-token",
        login: FakeResponse | None = None,
        other_posts: list[FakeResponse] | None = None,
        other_gets: list[FakeResponse] | None = None,
    ) -> None:
        self.pages = list(pages or [])
        self.login = login or FakeResponse(200, {"token": {"accessToken": token}})
        self.other_posts = list(other_posts or [])
        self.other_gets = list(other_gets or [])
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": "POST", "url": url, **kwargs})
        if url.endswith(LOGIN_PATH):
            return self.login
        return self.other_posts.pop(0)

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": "GET", "url": url, **kwargs})
        if ORDERS_BULK_PATH in url:
            page = int(parse_qs(urlparse(url).query)["page"][0])
            if page <= len(self.pages):
                return self.pages[page - 1]
            return FakeResponse(200, [])
        return self.other_gets.pop(0)

    def close(self) -> None:
        self.closed = True

    def bulk_calls(self) -> list[dict[str, Any]]:
        return [c for c in self.calls if ORDERS_BULK_PATH in c["url"]]


@pytest.fixture
def toast_config() -> ToastConfig:
    return ToastConfig(
        hostname="toast.example.com",
        client_id="client-id",
        client_secret="client-secret",
        restaurant_guid="rest-guid-default",
    )


@pytest.fixture
def fake_session():
    """Factory fixture: ``fake_session(pages, **kwargs) -> FakeSession``."""

    def make(pages: list[Any] | None = None, **kwargs: Any) -> FakeSession:
        responses = [
            p if isinstance(p, FakeResponse) else FakeResponse(200, p) for p in pages or []
        ]
        return FakeSession(responses, **kwargs)

    return make


@pytest.fixture
def fake_response():
    """The FakeResponse class, for building non-default responses."""
    return FakeResponse


def make_order(
    business_date: int | str | None = 20260109,
    checks: list[Any] | None = None,
    display_number: str = "1",
    **extra: Any,
) -> dict[str, Any]:
    order: dict[str, Any] = {
        "guid": f"order-{display_number}",
        "displayNumber": display_number,
        "businessDate": business_date,
        "checks": checks if checks is not None else [],
    }
    order.update(extra)
    return order


def make_check(
    amount: Any = 10.0,
    tax: Any = 1.0,
    payments: list[Any] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    check: dict[str, Any] = {
        "guid": "check-1",
        "displayNumber": "1",
        "amount": amount,
        "taxAmount": tax,
        "payments": payments if payments is not None else [],
    }
    check.update(extra)
    return check


def make_payment(amount: Any, status: str = "CAPTURED") -> dict[str, Any]:
    return {"amount": amount, "paymentStatus": status}


@pytest.fixture
def order_factory():
    """``(make_order, make_check, make_payment)`` builders for upstream records."""
    return make_order, make_check, make_payment
