from __future__ import annotations

import json
from typing import Any, Dict, List

from pydantic import ValidationError

from ..interface import OrderStore
from ..models import SalesOrder
from .serialization import merge_order
from ...errors import OrderNotFoundError, StorageError
from ...logging import get_logger
from ...sharepoint.client import SharePointClient

SELECT_FIELDS = ["Id", "Title", "OrderId", "Status", "CustomerName", "OrderJson"]


class SharePointOrderStore(OrderStore):
    """
    SharePoint list implementation.
    - One list item per order; the full order travels as JSON in the ``OrderJson`` column,
      with ``Title`` / ``OrderId`` / ``Status`` / ``CustomerName`` promoted for list views.
    - ``save_orders`` only sends items whose JSON changed since the last read.
    - Newest first is approximated by descending list item id.
    """

    def __init__(self, client: SharePointClient, page_size: int = 500) -> None:
        self.client = client
        self.page_size = page_size
        self.logger = get_logger(__name__)
        self._item_ids: Dict[str, int] = {}
        self._snapshots: Dict[str, str] = {}

    @staticmethod
    def _to_fields(order: SalesOrder) -> Dict[str, Any]:
        return {
            "Title": order.serial_number,
            "OrderId": order.id,
            "Status": order.status.value if order.status else None,
            "CustomerName": order.customer_name,
            "OrderJson": json.dumps(order.to_json_dict(), ensure_ascii=False),
        }

    def _decode(self, item: Dict[str, Any]) -> SalesOrder:
        try:
            return SalesOrder.model_validate(json.loads(item.get("OrderJson") or "{}"))
        except (json.JSONDecodeError, ValidationError) as e:
            raise StorageError(f"List item {item.get('Id')} holds an invalid order: {e}") from e

    def list_orders(self) -> List[SalesOrder]:
        items = self.client.get_items(SELECT_FIELDS, top=self.page_size)
        items.sort(key=lambda i: i.get("Id", 0), reverse=True)
        orders = []
        item_ids: Dict[str, int] = {}
        snapshots: Dict[str, str] = {}
        for item in items:
            order = self._decode(item)
            orders.append(order)
            item_ids[order.id] = item["Id"]
            snapshots[order.id] = item.get("OrderJson") or ""
        # Swap only after every item decoded; a failed read keeps the previous maps.
        self._item_ids = item_ids
        self._snapshots = snapshots
        self.logger.debug(f"Fetched {len(orders)} orders from SharePoint list '{self.client.list_title}'")
        return orders

    def _write(self, order: SalesOrder) -> None:
        fields = self._to_fields(order)
        item_id = self._item_ids.get(order.id)
        if item_id is None:
            created = self.client.create_item(fields)
            self._item_ids[order.id] = created["Id"]
        elif self._snapshots.get(order.id) != fields["OrderJson"]:
            self.client.merge_item(item_id, fields)
        self._snapshots[order.id] = fields["OrderJson"]

    def save_orders(self, orders: List[SalesOrder]) -> None:
        if not self._item_ids:
            # Learn existing item ids before deciding create vs. merge.
            self.list_orders()
        # Oldest first, so new items keep the newest-first order by list item id.
        for order in reversed(orders):
            self._write(order)

    def save_order(self, order: SalesOrder, is_new: bool) -> SalesOrder:
        if not is_new and order.id not in self._item_ids:
            self.list_orders()
            if order.id not in self._item_ids:
                raise OrderNotFoundError(order.id)
        self._write(order)
        return order

    def update_order(self, order_id: str, updates: Dict[str, Any]) -> None:
        current = next((o for o in self.list_orders() if o.id == order_id), None)
        if current is None:
            raise OrderNotFoundError(order_id)
        self._write(merge_order(current, updates))
