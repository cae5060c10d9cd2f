"""Example: totals and check listing for one business day

This example fetches every ordersBulk page for one day, prints the totals,
then lists the paid checks for that business date and saves them to CSV.

Prerequisites:
- Set TOAST_HOSTNAME, TOAST_CLIENT_ID, TOAST_CLIENT_SECRET environment variables
- Set TOAST_RESTAURANT_GUID (or pass restaurant_guid=... below)
"""

from pathlib import Path

from toast_orders import ToastConfig
from toast_orders.api import get_check_rows, get_order_totals
from toast_orders.client import make_session
from toast_orders.export import checks_frame

config = ToastConfig.from_env()
session = make_session(config.timeout)

# Toast expects offsets without a colon; "Z" is converted for you
start_date = "2026-01-09T00:00:00.000Z"  # MODIFY AS NEEDED
end_date = "2026-01-10T00:00:00.000Z"  # MODIFY AS NEEDED
business_date = 20260109  # MODIFY AS NEEDED

print(f"Summing ordersBulk for {start_date} to {end_date}...")
run = get_order_totals(session, config, start_date, end_date)

if run.result.ids_only:
    print(f"ordersBulk returned only order IDs, e.g. {run.result.sample_ids[:3]}")
    raise SystemExit(1)

print("\nTotals:")
for key, value in run.result.totals.as_dict().items():
    print(f"  - {key}: {value}")
print(f"  (pages fetched: {run.result.pages_fetched}, ended: {run.result.state.value})")

print(f"\nListing paid checks for business date {business_date}...")
checks = get_check_rows(session, config, start_date, end_date, business_date=business_date)

df = checks_frame(checks.result.rows)
print(f"{len(df)} checks")
print(df[["orderDisplayNumber", "checkDisplayNumber", "grossSales", "netSales"]].head())

output = Path("data/toast_checks.csv")
output.parent.mkdir(parents=True, exist_ok=True)
df.to_csv(output, index=False, encoding="utf-8")
print(f"\nSaved to {output}")
