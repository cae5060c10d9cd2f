"""Date helpers for the Toast ordersBulk API.

Toast wants ``yyyy-MM-dd'T'HH:mm:ss.SSSZ`` timestamps with a colon-free
offset (e.g. ``2016-01-01T14:13:12.000+0400``). Incoming query params often
look like:

- ``2026-01-09T00:00:00.000Z``
- ``2026-01-09T00:00:00.000+00:00``
- ``2026-01-09T00:00:00.000+0000``
- ``2026-01-09T00:00:00.000 0000`` (a ``+`` decoded to a space in a query string)

Examples:
    >>> normalize_toast_date("2026-01-09T00:00:00.000Z")
    '2026-01-09T00:00:00.000+0000'
    >>> normalize_toast_date("2026-01-09T00:00:00.000+05:30")
    '2026-01-09T00:00:00.000+0530'
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any

# "...000 0000" -> "...000+0000"
LOST_PLUS_RE = re.compile(r"(\.\d{3}) (\d{4})$")

# "...+00:00" -> "...+0000"
COLON_OFFSET_RE = re.compile(r"([+-]\d{2}):(\d{2})$")

BUSINESS_DATE_RE = re.compile(r"^(\d{4})-?(\d{2})-?(\d{2})")


def normalize_toast_date(value: str) -> str:
    """Normalize a loosely formatted timestamp into Toast's wire format.

    No validation of the date portion is done; input matching none of the
    patterns is returned unchanged.

    Args:
        value: Timestamp string from a query param.

    Returns:
        Timestamp ending in a ``±HHMM`` offset when one could be recovered.
    """
    value = LOST_PLUS_RE.sub(r"\1+\2", value)

    if value.endswith("Z"):
        return value[:-1] + "+0000"

    return COLON_OFFSET_RE.sub(r"\1\2", value)


def parse_business_date(value: Any) -> int | None:
    """Coerce a ``YYYYMMDD`` business date (int or str) to an int.

    Returns None for missing, non-numeric or non-finite values and for
    values that are not a valid calendar date.

    Examples:
        >>> parse_business_date("20260109")
        20260109
        >>> parse_business_date("2026-01-09") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            return None
        value = int(value)
    text = str(value).strip()
    if len(text) != 8 or not text.isdigit():
        return None
    try:
        datetime.strptime(text, "%Y%m%d")
    except ValueError:
        return None
    return int(text)


def business_date_from_timestamp(value: str) -> int | None:
    """Derive a Toast business date from the leading date of a timestamp.

    Example: ``"2026-01-08T00:00:00.000Z"`` -> ``20260108``. The offset is
    ignored; a business date may span past local midnight, so this is only
    a default, never a substitute for the order's own ``businessDate``.
    """
    m = BUSINESS_DATE_RE.match(value or "")
    if not m:
        return None
    return parse_business_date("".join(m.groups()))
