#!/usr/bin/env python3
"""Command line access to Toast order totals and check listings.

Examples:
  # Totals for a day, printed as JSON
  toast-orders totals --start 2026-01-09T00:00:00.000Z --end 2026-01-10T00:00:00.000Z

  # Checks for business date 20260109 written to CSV
  toast-orders checks --start 2026-01-09T00:00:00.000Z --end 2026-01-10T00:00:00.000Z \
      --business-date 20260109 -o checks.csv -v

Environment:
  TOAST_HOSTNAME, TOAST_CLIENT_ID, TOAST_CLIENT_SECRET,
  TOAST_RESTAURANT_GUID, TOAST_TIMEOUT
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from toast_orders.api import OrdersRun, get_check_rows, get_order_totals
from toast_orders.client import make_session
from toast_orders.config import ToastConfig
from toast_orders.dates import parse_business_date
from toast_orders.exceptions import ToastAPIError, UpstreamCallError
from toast_orders.export import checks_frame, totals_frame

logger = logging.getLogger(__name__)


def _business_date(value: str) -> int:
    parsed = parse_business_date(value)
    if parsed is None:
        raise argparse.ArgumentTypeError(f"expected YYYYMMDD, got {value!r}")
    return parsed


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="toast-orders",
        description="Aggregate Toast ordersBulk data into sales totals or check rows.",
    )
    sub = p.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("totals", "Sum gross sales, net sales, tax and discounts over every order."),
        ("checks", "List checks with at least one payment for one business date."),
    ):
        sp = sub.add_parser(name, help=help_text)
        sp.add_argument("--start", required=True, help="Start timestamp (Z or offset).")
        sp.add_argument("--end", required=True, help="End timestamp (Z or offset).")
        sp.add_argument("--restaurant-guid", default=None, help="Overrides TOAST_RESTAURANT_GUID.")
        sp.add_argument(
            "--page-size", type=int, default=None, help="Orders per page (default 100)."
        )
        sp.add_argument("--max-pages", type=int, default=None, help="Page cap (default 50).")
        sp.add_argument(
            "-o", "--output", default=None, help="Write CSV here instead of JSON to stdout."
        )
        sp.add_argument("--quiet", action="store_true", help="Less logging output.")
        sp.add_argument(
            "-v",
            "--verbose",
            "--debug",
            action="store_true",
            dest="verbose",
            help="Verbose/debug logging output.",
        )
        if name == "checks":
            sp.add_argument(
                "--business-date",
                type=_business_date,
                default=None,
                help="Business date to keep, YYYYMMDD (default 20260109).",
            )
            sp.add_argument(
                "--selection-discounts",
                action="store_true",
                help="Also count discounts applied to line-item selections.",
            )
    return p


def _run(args: argparse.Namespace) -> OrdersRun:
    config = ToastConfig.from_env()
    session = make_session(config.timeout)
    if args.command == "checks":
        return get_check_rows(
            session,
            config,
            args.start,
            args.end,
            restaurant_guid=args.restaurant_guid,
            page_size=args.page_size,
            max_pages=args.max_pages,
            business_date=args.business_date,
            include_selection_discounts=args.selection_discounts,
        )
    return get_order_totals(
        session,
        config,
        args.start,
        args.end,
        restaurant_guid=args.restaurant_guid,
        page_size=args.page_size,
        max_pages=args.max_pages,
    )


def _write(run: OrdersRun, command: str, output: str | None) -> None:
    result = run.result
    if output:
        if command == "checks":
            df = checks_frame(result.rows)
        else:
            df = totals_frame(
                result.totals,
                startDate=run.request.normalized_start_date,
                endDate=run.request.normalized_end_date,
            )
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(output_path, index=False, encoding="utf-8")
        logger.info("Wrote %d rows to %s", len(df), output_path)
        return

    body = {**run.request.dates(), **result.totals.as_dict()}
    if command == "checks":
        body["targetBusinessDate"] = run.target_business_date
        body["checks"] = [row.as_dict() for row in result.rows]
    print(json.dumps(body, indent=2))


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    log_level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s: %(message)s",
    )

    try:
        run = _run(args)
    except UpstreamCallError as e:
        logger.error("Toast call failed on page %s: HTTP %s", e.page, e.status_code)
        print(f"ERROR: {e} (HTTP {e.status_code}): {json.dumps(e.detail)}", file=sys.stderr)
        return 2
    except ToastAPIError as e:
        logger.error("Error: %s", e)
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    if run.result.ids_only:
        print(
            f"ERROR: ordersBulk returned only order IDs ({run.result.id_count}); "
            f"sample: {', '.join(run.result.sample_ids)}",
            file=sys.stderr,
        )
        return 2

    _write(run, args.command, args.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
