"""Order lifecycle: which role may do what, from which status, to which status.

Every action appends exactly one history entry. Actions whose target depends
on shipment progress (dispatch, delivery, emergency resolution) carry
``to_status=None`` and resolve it from the order itself.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from order_portal.data.models import (
    HistoryEntry,
    OrderStatus,
    Role,
    SalesOrder,
    UserProfile,
    history_timestamp,
)
from order_portal.errors import ActionNotAllowedError, InvalidTransitionError

S = OrderStatus
EDITABLE: FrozenSet[OrderStatus] = frozenset({S.PENDING_ASSISTANT, S.PENDING_FINANCE, S.ON_HOLD})


class Action(str, Enum):
    CREATE = "create"
    MODIFY = "modify"
    CANCEL = "cancel"
    APPROVE_QUANTITIES = "approve_quantities"
    REJECT = "reject"
    APPROVE = "approve"
    REFUSE_CREDIT = "refuse_credit"
    MARK_READY = "mark_ready"
    PUT_ON_HOLD = "put_on_hold"
    DISPATCH = "dispatch"
    CONFIRM_DELIVERY = "confirm_delivery"
    REPORT_EMERGENCY = "report_emergency"
    RESOLVE_EMERGENCY = "resolve_emergency"


@dataclass(frozen=True)
class TransitionRule:
    roles: FrozenSet[Role]
    from_statuses: FrozenSet[Optional[OrderStatus]]
    to_status: Optional[OrderStatus]
    default_message: str


def _rule(roles, from_statuses, to_status, message) -> TransitionRule:
    return TransitionRule(frozenset(roles), frozenset(from_statuses), to_status, message)


TRANSITIONS: Dict[Action, TransitionRule] = {
    Action.CREATE: _rule({Role.SALES}, {None}, S.PENDING_ASSISTANT, "Order Created"),
    Action.MODIFY: _rule({Role.SALES, Role.ASSISTANT}, EDITABLE, None, "Order Modified"),
    Action.CANCEL: _rule({Role.SALES}, EDITABLE, S.CANCELED, "Order Canceled"),
    Action.APPROVE_QUANTITIES: _rule({Role.ASSISTANT}, {S.PENDING_ASSISTANT}, S.PENDING_FINANCE, "Qty Approved"),
    Action.REJECT: _rule({Role.ASSISTANT}, {S.PENDING_ASSISTANT}, S.REJECTED, "Rejected by Support"),
    Action.APPROVE: _rule({Role.FINANCE}, {S.PENDING_FINANCE}, S.APPROVED, "Finance Approved"),
    Action.REFUSE_CREDIT: _rule({Role.FINANCE}, {S.PENDING_FINANCE}, S.REJECTED, "Credit Refused"),
    Action.MARK_READY: _rule({Role.WAREHOUSE}, {S.APPROVED, S.ON_HOLD}, S.READY_FOR_DRIVER, "Order Packed"),
    Action.PUT_ON_HOLD: _rule({Role.WAREHOUSE}, {S.APPROVED}, S.ON_HOLD, "Put On Hold"),
    Action.DISPATCH: _rule({Role.DRIVER_SUPERVISOR}, {S.READY_FOR_DRIVER, S.PARTIALLY_SHIPPED}, None, "Shipment Dispatched"),
    Action.CONFIRM_DELIVERY: _rule({Role.TRUCK_DRIVER}, {S.IN_TRANSIT, S.PARTIALLY_SHIPPED}, None, "Delivery Confirmed"),
    Action.REPORT_EMERGENCY: _rule({Role.TRUCK_DRIVER}, {S.IN_TRANSIT, S.PARTIALLY_SHIPPED}, S.EMERGENCY, "Emergency Reported"),
    Action.RESOLVE_EMERGENCY: _rule({Role.DRIVER_SUPERVISOR}, {S.EMERGENCY}, None, "Emergency Resolved"),
}


def check_transition(action: Action, role: Role, status: Optional[OrderStatus]) -> TransitionRule:
    """Return the rule for ``action`` or raise if the role or current status forbids it."""
    rule = TRANSITIONS[action]
    if role not in rule.roles:
        raise ActionNotAllowedError(action.value, role.value)
    if status not in rule.from_statuses:
        raise InvalidTransitionError(action.value, status.value if status else "new")
    return rule


def allowed_actions(role: Role, status: Optional[OrderStatus]) -> list[Action]:
    """Actions the UI should offer ``role`` for an order in ``status``."""
    return [a for a, r in TRANSITIONS.items() if role in r.roles and status in r.from_statuses]


def shipping_status(order: SalesOrder) -> OrderStatus:
    """Where an order with shipments stands once no emergency is open."""
    if not order.fully_dispatched:
        return S.PARTIALLY_SHIPPED
    if order.shipments and all(s.delivered for s in order.shipments):
        return S.COMPLETED
    return S.IN_TRANSIT


def apply_action(
    order: SalesOrder,
    action: Action,
    user: UserProfile,
    note: str = "",
    updates: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> SalesOrder:
    """Return a copy of ``order`` advanced by ``action`` with one history entry appended.

    ``updates`` are field changes (snake_case) applied before the target status is
    resolved, e.g. a new shipment list for a dispatch.
    """
    rule = check_transition(action, user.role, order.status)
    changed = order.model_copy(update=updates or {}, deep=True)
    if rule.to_status is not None:
        status = rule.to_status
    elif action == Action.MODIFY:
        status = order.status
    else:
        status = shipping_status(changed)
    entry = HistoryEntry(
        role=user.role.value,
        action=note.strip() or rule.default_message,
        date=history_timestamp(now),
        user=user.name,
    )
    return changed.model_copy(update={"status": status, "history": [*order.history, entry]})
