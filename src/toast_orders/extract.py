"""Locate the orders array inside an ordersBulk response.

Toast "ordersBulk" responses vary depending on restaurant configuration.
Observed shapes, checked in this order:

1. ``{"orders": [...]}``
2. ``{"orderIds": [...]}`` -- sometimes bare GUID strings, sometimes full orders
3. ``[...]`` -- the response itself is an array (orders or IDs)
4. ``{"data": {"orders": [...]}}``

The extracted array is then classified as full records, identifiers only
or empty so the pagination driver can handle each case explicitly.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

SAMPLE_ID_LIMIT = 10


class OrdersKind(str, Enum):
    """What an extracted orders array contains."""

    FULL_RECORDS = "full_records"
    IDENTIFIERS_ONLY = "identifiers_only"
    EMPTY = "empty"


@dataclass(frozen=True)
class ExtractedOrders:
    """Orders array from one response, tagged with its kind.

    Attributes:
        kind: FULL_RECORDS, IDENTIFIERS_ONLY or EMPTY.
        items: The raw array elements, in upstream order.
    """

    kind: OrdersKind
    items: list[Any] = field(default_factory=list)

    @classmethod
    def empty(cls) -> ExtractedOrders:
        return cls(OrdersKind.EMPTY, [])

    def __len__(self) -> int:
        return len(self.items)

    def sample_ids(self, limit: int = SAMPLE_ID_LIMIT) -> list[str]:
        """First ``limit`` identifiers, for diagnostics in IDs-only responses."""
        if self.kind is not OrdersKind.IDENTIFIERS_ONLY:
            return []
        return list(self.items[:limit])


def extract_orders(payload: Any) -> list[Any]:
    """Return the first orders-like array found in ``payload``.

    Args:
        payload: Parsed JSON from ordersBulk (dict, list, None, ...).

    Returns:
        The array found, or an empty list if nothing matches.
    """
    if not payload:
        return []

    if isinstance(payload, Mapping):
        if isinstance(payload.get("orders"), list):
            return payload["orders"]
        if isinstance(payload.get("orderIds"), list):
            return payload["orderIds"]

    if isinstance(payload, list):
        return payload

    if isinstance(payload, Mapping):
        data = payload.get("data")
        if isinstance(data, Mapping) and isinstance(data.get("orders"), list):
            return data["orders"]

    return []


def classify_orders(payload: Any) -> ExtractedOrders:
    """Extract the orders array and tag what it holds.

    A non-empty array whose elements are all strings is IDENTIFIERS_ONLY:
    ordersBulk returned GUIDs with no financial detail. Mixed arrays are
    FULL_RECORDS; their string elements are skipped during aggregation.
    """
    items = extract_orders(payload)
    if not items:
        return ExtractedOrders(OrdersKind.EMPTY, [])
    if all(isinstance(x, str) for x in items):
        return ExtractedOrders(OrdersKind.IDENTIFIERS_ONLY, list(items))
    return ExtractedOrders(OrdersKind.FULL_RECORDS, list(items))


def response_keys(payload: Any) -> list[str] | None:
    """Top-level keys of a dict response (None for other shapes)."""
    if isinstance(payload, Mapping):
        return list(payload.keys())
    return None


def response_type(payload: Any) -> str:
    """JSON type name of the response, as reported in debug output."""
    if isinstance(payload, list):
        return "array"
    if isinstance(payload, Mapping):
        return "object"
    if payload is None:
        return "null"
    if isinstance(payload, bool):
        return "boolean"
    if isinstance(payload, (int, float)):
        return "number"
    return "string"
