"""HTTP endpoints for Toast order totals and check listings.

Endpoints (all GET):
    /api/toast/orders/totals            totals over every page
    /api/toast/orders/checks            per-check rows for one business date
    /api/toast/orders/bulk              one page, per-check rows
    /api/toast/sales/revenue-centers    ERA metrics grouped by revenue center
    /api/toast/config                   default restaurant GUID
    /api/toast/token                    token acquisition check

Run with any ASGI server, e.g. ``uvicorn toast_orders.server:app``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any

import requests
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from toast_orders import __version__
from toast_orders.api import (
    BULK_DEFAULT_PAGE_SIZE,
    OrdersRun,
    get_check_rows,
    get_order_totals,
    get_orders_page,
    ids_only_body,
    raise_for_page,
)
from toast_orders.auth import get_access_token
from toast_orders.client import fetch_revenue_center_metrics, make_session
from toast_orders.config import ToastConfig
from toast_orders.dates import parse_business_date
from toast_orders.exceptions import (
    ConfigError,
    UpstreamAuthError,
    UpstreamCallError,
    ValidationError,
)
from toast_orders.extract import OrdersKind, response_keys, response_type

logger = logging.getLogger(__name__)

DATE_FORMAT_HINT = (
    "If this is a date-format error, use Z format in the browser and let the "
    "server normalize it."
)


def _flag(value: str | None) -> bool:
    return value == "1"


SessionFactory = Callable[[ToastConfig], requests.Session]


def _default_session(config: ToastConfig) -> requests.Session:
    return make_session(config.timeout)


def _config(request: Request) -> ToastConfig:
    return request.app.state.config


def _session(request: Request) -> Iterator[requests.Session]:
    """One upstream session per inbound request, closed when the response is done."""
    session = request.app.state.session_factory(request.app.state.config)
    try:
        yield session
    finally:
        session.close()


def _ids_only_response(run: OrdersRun) -> JSONResponse:
    result = run.result
    body = ids_only_body(run.request, result.sample_ids, result.id_count, result.page)
    body["pageSize"] = result.page_size
    if run.target_business_date is not None:
        body["targetBusinessDate"] = run.target_business_date
    return JSONResponse(body, status_code=200)


def create_app(
    config: ToastConfig | None = None,
    session_factory: SessionFactory | None = None,
) -> FastAPI:
    """Build the FastAPI app.

    Args:
        config: Toast configuration. Defaults to ToastConfig.from_env(),
            read once here rather than per request.
        session_factory: Builds the upstream HTTP session for each request
            from the config. Defaults to make_session(config.timeout).

    Returns:
        Configured FastAPI application.
    """
    config = config or ToastConfig.from_env()
    app = FastAPI(title="Toast Orders API", version=__version__)
    app.state.config = config
    app.state.session_factory = session_factory or _default_session

    @app.exception_handler(ConfigError)
    async def _config_error(request: Request, exc: ConfigError) -> JSONResponse:
        logger.error("Configuration error: %s", exc)
        return JSONResponse({"error": str(exc)}, status_code=500)

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(RequestValidationError)
    async def _query_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            {"error": "Invalid query params", "detail": exc.errors()}, status_code=400
        )

    @app.exception_handler(UpstreamAuthError)
    async def _auth_error(request: Request, exc: UpstreamAuthError) -> JSONResponse:
        logger.error("Toast authentication failed: %s", exc)
        return JSONResponse({"error": "Server error", "message": str(exc)}, status_code=500)

    @app.exception_handler(UpstreamCallError)
    async def _upstream_error(request: Request, exc: UpstreamCallError) -> JSONResponse:
        body: dict[str, Any] = {
            "error": exc.message,
            "status": exc.status_code,
            "detail": exc.detail,
        }
        if exc.page is not None:
            body["page"] = exc.page
            body["hint"] = DATE_FORMAT_HINT
        return JSONResponse(body, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def _server_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse({"error": "Server error", "message": str(exc)}, status_code=500)

    @app.get("/api/toast/orders/totals")
    def order_totals(
        request: Request,
        session: requests.Session = Depends(_session),
        startDate: str | None = None,
        endDate: str | None = None,
        restaurantGuid: str | None = None,
        pageSize: int | None = None,
        maxPages: int | None = None,
        debug: str | None = None,
    ) -> JSONResponse:
        """Totals across every page of ordersBulk for the date range."""
        cfg = _config(request)
        run = get_order_totals(
            session,
            cfg,
            startDate,
            endDate,
            restaurant_guid=restaurantGuid,
            page_size=pageSize,
            max_pages=maxPages,
        )
        if run.result.ids_only:
            return _ids_only_response(run)

        body: dict[str, Any] = {**run.request.dates(), **run.result.totals.as_dict()}
        if _flag(debug):
            body["toastUrl"] = run.first_page_url
            body["pagination"] = run.result.pagination_debug()
        return JSONResponse(body)

    @app.get("/api/toast/orders/checks")
    def order_checks(
        request: Request,
        session: requests.Session = Depends(_session),
        startDate: str | None = None,
        endDate: str | None = None,
        restaurantGuid: str | None = None,
        businessDate: str | None = None,
        pageSize: int | None = None,
        maxPages: int | None = None,
        selectionDiscounts: str | None = None,
        debug: str | None = None,
    ) -> JSONResponse:
        """Checks with at least one payment for a single business date."""
        cfg = _config(request)
        target = None
        if businessDate is not None:
            target = parse_business_date(businessDate)
            if target is None:
                raise ValidationError(f"Invalid businessDate {businessDate!r}, expected YYYYMMDD")

        run = get_check_rows(
            session,
            cfg,
            startDate,
            endDate,
            restaurant_guid=restaurantGuid,
            page_size=pageSize,
            max_pages=maxPages,
            business_date=target,
            include_selection_discounts=_flag(selectionDiscounts),
        )
        if run.result.ids_only:
            return _ids_only_response(run)

        result = run.result
        body: dict[str, Any] = {
            "startDate": run.request.start_date,
            "endDate": run.request.end_date,
            "targetBusinessDate": run.target_business_date,
            "normalizedStartDate": run.request.normalized_start_date,
            "normalizedEndDate": run.request.normalized_end_date,
            **result.totals.as_dict(),
            "checks": [row.as_dict() for row in result.rows],
        }
        if _flag(debug):
            body["pagination"] = result.pagination_debug()
            body["businessDateFiltering"] = result.filtering_debug()
        return JSONResponse(body)

    @app.get("/api/toast/orders/bulk")
    def orders_bulk(
        request: Request,
        session: requests.Session = Depends(_session),
        startDate: str | None = None,
        endDate: str | None = None,
        restaurantGuid: str | None = None,
        page: int = 1,
        pageSize: int = BULK_DEFAULT_PAGE_SIZE,
        debug: str | None = None,
    ) -> JSONResponse:
        """A single ordersBulk page reduced to per-check metrics."""
        cfg = _config(request)
        fetched = get_orders_page(
            session,
            cfg,
            startDate,
            endDate,
            restaurant_guid=restaurantGuid,
            page=page,
            page_size=pageSize,
        )
        bulk = fetched.bulk

        if bulk.ok and bulk.empty_body:
            return JSONResponse(
                {
                    "error": "Toast returned an empty response body",
                    "status": bulk.status_code,
                    "hint": (
                        "Often means no orders in the date range (or 204 No Content). "
                        "Try a wider range."
                    ),
                },
                status_code=502,
            )

        if _flag(debug):
            return JSONResponse(
                {
                    "toastUrl": bulk.url,
                    "normalizedStartDate": fetched.request.normalized_start_date,
                    "normalizedEndDate": fetched.request.normalized_end_date,
                    "toastStatus": bulk.status_code,
                    "toastOk": bulk.ok,
                    "toastJsonType": response_type(bulk.payload),
                    "toastJsonKeys": response_keys(bulk.payload),
                    "toastJson": bulk.payload,
                }
            )

        raise_for_page(fetched)

        if fetched.orders.kind is OrdersKind.IDENTIFIERS_ONLY:
            body = ids_only_body(
                fetched.request, fetched.orders.sample_ids(), len(fetched.orders), bulk.page
            )
            return JSONResponse(body)

        return JSONResponse(
            {
                **fetched.request.dates(),
                "page": page,
                "pageSize": pageSize,
                "orderCount": len(fetched.orders),
                "checks": [row.as_dict() for row in fetched.aggregate.rows],
            }
        )

    @app.get("/api/toast/sales/revenue-centers")
    def revenue_centers(
        request: Request,
        session: requests.Session = Depends(_session),
        start: str | None = None,
        end: str | None = None,
    ) -> JSONResponse:
        """ERA sales metrics grouped by revenue center for business dates start..end."""
        cfg = _config(request)
        cfg.require_hostname()
        if parse_business_date(start) is None or parse_business_date(end) is None:
            raise ValidationError("Missing required query params: start=YYYYMMDD&end=YYYYMMDD")

        token = get_access_token(session, cfg)
        report_guid, data = fetch_revenue_center_metrics(session, cfg, token, start, end)
        return JSONResponse(
            {"start": start, "end": end, "reportRequestGuid": report_guid, "data": data}
        )

    @app.get("/api/toast/config")
    def toast_config(request: Request) -> dict[str, Any]:
        return {"restaurantGuid": request.app.state.config.restaurant_guid}

    @app.get("/api/toast/token")
    def toast_token(
        request: Request, session: requests.Session = Depends(_session)
    ) -> dict[str, Any]:
        """Check that the configured credentials can obtain a token."""
        cfg = _config(request)
        get_access_token(session, cfg)
        return {"ok": True}

    return app


app = create_app()
