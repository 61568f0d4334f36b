from __future__ import annotations

import time
from typing import Any, Dict, List

from ..interface import OrderStore
from ..local_storage import LocalStorage
from ..models import SalesOrder
from .serialization import merge_order, orders_from_json, orders_to_json
from ...config import get_config
from ...errors import StorageError
from ...logging import get_logger


class SimulatedCloudOrderStore(OrderStore):
    """
    Stand-in for a remote orders API.
    - Each read sleeps ``latency_ms`` to mimic a network round trip.
    - Data lives under its own storage key (the "mock cloud"), separate from the local key.
    - Errors are logged and re-raised so callers can fall back to their cached copy.
    """

    def __init__(self, storage: LocalStorage = None, key: str = None, latency_ms: int = None) -> None:
        config = get_config()
        self.storage = storage or LocalStorage()
        self.key = key or config.cloud_key
        self.latency_ms = config.cloud_latency_ms if latency_ms is None else latency_ms
        self.logger = get_logger(__name__)

    def _simulate_latency(self) -> None:
        if self.latency_ms > 0:
            time.sleep(self.latency_ms / 1000.0)

    def list_orders(self) -> List[SalesOrder]:
        try:
            self._simulate_latency()
            return orders_from_json(self.storage.get_json(self.key, default=[]))
        except StorageError as e:
            self.logger.error(f"Cloud fetch error: {e}")
            raise

    def get_orders(self) -> List[SalesOrder]:
        return self.list_orders()

    def save_orders(self, orders: List[SalesOrder]) -> None:
        try:
            self.storage.set_json(self.key, orders_to_json(orders))
        except StorageError as e:
            self.logger.error(f"Cloud save error: {e}")
            raise

    def save_order(self, order: SalesOrder, is_new: bool) -> SalesOrder:
        current = self.list_orders()
        if is_new:
            updated = [order] + current
        else:
            updated = [order if o.id == order.id else o for o in current]
        self.save_orders(updated)
        return order

    def update_order(self, order_id: str, updates: Dict[str, Any]) -> None:
        # Unknown ids are ignored, as the remote API would.
        orders = self.list_orders()
        self.save_orders([merge_order(o, updates) if o.id == order_id else o for o in orders])

    def update_order_status(self, order_id: str, updates: Dict[str, Any]) -> None:
        """Alias kept for callers written against the remote API's naming."""
        self.update_order(order_id, updates)
