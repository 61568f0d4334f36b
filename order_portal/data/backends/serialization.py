from __future__ import annotations

from typing import Any, Dict, Iterable, List

from pydantic import ValidationError

from ..models import SalesOrder
from ...errors import StorageError


def orders_from_json(payload: Any) -> List[SalesOrder]:
    """Decode a stored JSON list into orders; anything else is a StorageError."""
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise StorageError(f"Expected a JSON list of orders, got {type(payload).__name__}")
    try:
        return [SalesOrder.model_validate(row) for row in payload]
    except ValidationError as e:
        raise StorageError(f"Stored order does not match the order schema: {e}") from e


def orders_to_json(orders: Iterable[SalesOrder]) -> List[Dict[str, Any]]:
    return [o.to_json_dict() for o in orders]


def merge_order(order: SalesOrder, updates: Dict[str, Any]) -> SalesOrder:
    """Shallow object-spread of camelCase ``updates`` over ``order``."""
    merged = {**order.to_json_dict(), **updates}
    try:
        return SalesOrder.model_validate(merged)
    except ValidationError as e:
        raise StorageError(f"Update for order {order.id} is not a valid order: {e}") from e
