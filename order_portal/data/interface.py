from __future__ import annotations

from typing import Any, Dict, List, Protocol

from .models import SalesOrder


# ---- Order store protocol ----

class OrderStore(Protocol):
    """
    Backend-agnostic persistence contract for the portal UI.

    - ``list_orders`` always performs a fresh read of the underlying source;
      caching of the last good read lives in the sync layer, not here.
    - Writes are whole-order (or whole-collection) overwrites with no conflict
      detection. Concurrent writers silently overwrite each other.
    - Every failure surfaces as ``StorageError``.
    """

    def list_orders(self) -> List[SalesOrder]:
        """Return every order, newest first."""
        ...

    def save_orders(self, orders: List[SalesOrder]) -> None:
        """Persist the full collection (used after each local state update)."""
        ...

    def save_order(self, order: SalesOrder, is_new: bool) -> SalesOrder:
        """Create (prepend) or replace a single order by id."""
        ...

    def update_order(self, order_id: str, updates: Dict[str, Any]) -> None:
        """Merge a partial update (camelCase keys) into one stored order."""
        ...
