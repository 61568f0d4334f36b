from __future__ import annotations

from datetime import datetime
from typing import Callable, Dict, List, Optional

from order_portal.data.models import (
    EmergencyReport,
    SalesOrder,
    Shipment,
    ShipmentItem,
    UserProfile,
    history_timestamp,
    new_id,
    new_serial_number,
)
from order_portal.data.catalog import truck_for_driver
from order_portal.data.sync import OrderSync
from order_portal.errors import ActionNotAllowedError, OrderNotFoundError, OrderValidationError
from order_portal.logging import get_logger
from order_portal.workflow.transitions import Action, apply_action, check_transition


def validate_draft(order: SalesOrder) -> None:
    """Required fields for submitting the order form."""
    if not order.customer_name.strip() or not order.area_location.strip() or not order.items:
        raise OrderValidationError("Customer name, location and at least one item are required")
    for item in order.items:
        if not item.item_name.strip():
            raise OrderValidationError("Every item needs a product name")
        if item.quantity <= 0:
            raise OrderValidationError(f"Quantity for '{item.item_name}' must be a positive number")


class OrderWorkflow:
    """
    Role-gated action handlers over the in-memory order collection.

    Each handler validates, builds the updated order, swaps it into the collection
    and pushes the full collection through the sync layer.
    """

    def __init__(self, sync: OrderSync, clock: Callable[[], datetime] = datetime.now) -> None:
        self.sync = sync
        self.clock = clock
        self.logger = get_logger(__name__)

    @property
    def orders(self) -> List[SalesOrder]:
        return self.sync.orders

    def get(self, order_id: str) -> SalesOrder:
        for order in self.orders:
            if order.id == order_id:
                return order
        raise OrderNotFoundError(order_id)

    def _replace(self, updated: SalesOrder) -> SalesOrder:
        self.sync.push([updated if o.id == updated.id else o for o in self.orders])
        return updated

    def _act(self, order_id: str, action: Action, user: UserProfile, note: str = "", updates: Optional[dict] = None) -> SalesOrder:
        updated = apply_action(self.get(order_id), action, user, note=note, updates=updates, now=self.clock())
        self.logger.info(f"{user.name} ({user.role.value}) {action.value} {updated.serial_number} -> {updated.status.value}")
        return self._replace(updated)

    # ---------- sales ----------

    def submit_order(self, draft: SalesOrder, user: UserProfile, editing_id: Optional[str] = None) -> SalesOrder:
        """Create a new order, or save edits to ``editing_id`` keeping its status."""
        validate_draft(draft)
        if editing_id:
            current = self.get(editing_id)
            fields = draft.model_dump(include={
                "customer_name", "area_location", "order_date", "receiving_date",
                "delivery_shift", "delivery_type", "overall_notes",
            })
            fields["items"] = [item.model_copy() for item in draft.items]
            return self._act(current.id, Action.MODIFY, user, updates=fields)

        order = draft.model_copy(update={
            "id": new_id(),
            "serial_number": new_serial_number(),
            "status": None,
            "created_by": user.email,
            "creator_name": user.name,
            "history": [],
            "shipments": [],
            "emergency": None,
        }, deep=True)
        order = apply_action(order, Action.CREATE, user, now=self.clock())
        self.sync.push([order, *self.orders])
        self.logger.info(f"{user.name} created {order.serial_number} for {order.customer_name}")
        return order

    def cancel(self, order_id: str, user: UserProfile, note: str = "") -> SalesOrder:
        return self._act(order_id, Action.CANCEL, user, note)

    # ---------- reviewers ----------

    def approve_quantities(self, order_id: str, user: UserProfile, note: str = "") -> SalesOrder:
        return self._act(order_id, Action.APPROVE_QUANTITIES, user, note)

    def reject(self, order_id: str, user: UserProfile, note: str = "") -> SalesOrder:
        return self._act(order_id, Action.REJECT, user, note)

    def approve(self, order_id: str, user: UserProfile, note: str = "") -> SalesOrder:
        return self._act(order_id, Action.APPROVE, user, note)

    def refuse_credit(self, order_id: str, user: UserProfile, note: str = "") -> SalesOrder:
        return self._act(order_id, Action.REFUSE_CREDIT, user, note)

    def mark_ready(self, order_id: str, user: UserProfile, note: str = "") -> SalesOrder:
        return self._act(order_id, Action.MARK_READY, user, note)

    def put_on_hold(self, order_id: str, user: UserProfile, note: str = "") -> SalesOrder:
        return self._act(order_id, Action.PUT_ON_HOLD, user, note)

    # ---------- fleet ----------

    def dispatch(
        self,
        order_id: str,
        user: UserProfile,
        driver_name: str,
        quantities: Dict[str, int],
        warehouse: Optional[str] = None,
        note: str = "",
    ) -> SalesOrder:
        """Load part or all of the remaining quantities onto one driver's truck."""
        order = self.get(order_id)
        check_transition(Action.DISPATCH, user.role, order.status)
        if not driver_name.strip():
            raise OrderValidationError("A driver must be selected")
        remaining = order.remaining_quantities()
        lines = []
        for name, qty in quantities.items():
            if qty <= 0:
                continue
            if name not in remaining:
                raise OrderValidationError(f"'{name}' is not on this order")
            if qty > remaining[name]:
                raise OrderValidationError(f"Only {remaining[name]} of '{name}' left to dispatch")
            lines.append(ShipmentItem(item_name=name, quantity=qty))
        if not lines:
            raise OrderValidationError("Nothing to dispatch")
        shipment = Shipment(
            driver_name=driver_name,
            truck=truck_for_driver(driver_name),
            warehouse=warehouse,
            items=lines,
            date=history_timestamp(self.clock()),
        )
        return self._act(order_id, Action.DISPATCH, user, note, updates={"shipments": [*order.shipments, shipment]})

    def confirm_delivery(self, order_id: str, user: UserProfile, note: str = "") -> SalesOrder:
        """Mark every open shipment assigned to the signed-in driver as delivered."""
        order = self.get(order_id)
        check_transition(Action.CONFIRM_DELIVERY, user.role, order.status)
        mine = [s for s in order.shipments if s.driver_name == user.name and not s.delivered]
        if not mine:
            raise ActionNotAllowedError(Action.CONFIRM_DELIVERY.value, user.role.value)
        shipments = [s.model_copy(update={"delivered": True}) if s in mine else s for s in order.shipments]
        return self._act(order_id, Action.CONFIRM_DELIVERY, user, note, updates={"shipments": shipments})

    def report_emergency(self, order_id: str, user: UserProfile, reason: str) -> SalesOrder:
        order = self.get(order_id)
        check_transition(Action.REPORT_EMERGENCY, user.role, order.status)
        if not any(s.driver_name == user.name for s in order.shipments):
            raise ActionNotAllowedError(Action.REPORT_EMERGENCY.value, user.role.value)
        if not reason.strip():
            raise OrderValidationError("Describe the emergency")
        report = EmergencyReport(reason=reason.strip(), reported_by=user.name, date=history_timestamp(self.clock()))
        return self._act(order_id, Action.REPORT_EMERGENCY, user, reason, updates={"emergency": report})

    def resolve_emergency(self, order_id: str, user: UserProfile, note: str = "") -> SalesOrder:
        return self._act(order_id, Action.RESOLVE_EMERGENCY, user, note, updates={"emergency": None})


def blank_draft() -> SalesOrder:
    """Empty order form."""
    return SalesOrder()
