from __future__ import annotations

from typing import Any, Dict, List

from ..interface import OrderStore
from ..local_storage import LocalStorage
from ..models import SalesOrder
from .serialization import merge_order, orders_from_json, orders_to_json
from ...config import get_config
from ...errors import OrderNotFoundError
from ...logging import get_logger


class LocalOrderStore(OrderStore):
    """
    Local-storage implementation.
    - The whole collection lives under one storage key as a JSON list.
    - Every call re-reads the key, so other writers' changes show up on the next poll.
    """

    def __init__(self, storage: LocalStorage = None, key: str = None) -> None:
        self.storage = storage or LocalStorage()
        self.key = key or get_config().orders_key
        self.logger = get_logger(__name__)

    def list_orders(self) -> List[SalesOrder]:
        return orders_from_json(self.storage.get_json(self.key, default=[]))

    def save_orders(self, orders: List[SalesOrder]) -> None:
        self.storage.set_json(self.key, orders_to_json(orders))
        self.logger.debug(f"Wrote {len(orders)} orders to '{self.key}'")

    def save_order(self, order: SalesOrder, is_new: bool) -> SalesOrder:
        current = self.list_orders()
        if is_new:
            updated = [order] + current
        else:
            updated = [order if o.id == order.id else o for o in current]
        self.save_orders(updated)
        return order

    def update_order(self, order_id: str, updates: Dict[str, Any]) -> None:
        current = self.list_orders()
        if not any(o.id == order_id for o in current):
            raise OrderNotFoundError(order_id)
        self.save_orders([merge_order(o, updates) if o.id == order_id else o for o in current])
