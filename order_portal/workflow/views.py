from __future__ import annotations

from typing import Dict, Iterable, List, Literal, Optional

from order_portal.data.models import OrderStatus, Role, SalesOrder, UserProfile

Tab = Literal["pending", "history"]

# Statuses each reviewer queue works on.
QUEUES: Dict[Role, frozenset] = {
    Role.ASSISTANT: frozenset({OrderStatus.PENDING_ASSISTANT}),
    Role.FINANCE: frozenset({OrderStatus.PENDING_FINANCE}),
    Role.WAREHOUSE: frozenset({OrderStatus.APPROVED, OrderStatus.ON_HOLD}),
    Role.DRIVER_SUPERVISOR: frozenset({OrderStatus.READY_FOR_DRIVER, OrderStatus.PARTIALLY_SHIPPED, OrderStatus.EMERGENCY}),
}


def matches_search(order: SalesOrder, term: str) -> bool:
    """Case-insensitive customer name match, or serial number substring."""
    if not term:
        return True
    return term.lower() in order.customer_name.lower() or term in (order.serial_number or "")


def visible_orders(orders: Iterable[SalesOrder], user: UserProfile, tab: Tab = "pending", search: str = "") -> List[SalesOrder]:
    """Orders the signed-in user should see on ``tab``, filtered by ``search``."""
    base = list(orders)
    if user.role == Role.SALES:
        base = [o for o in base if o.created_by == user.email]
    elif user.role == Role.TRUCK_DRIVER:
        base = [o for o in base if any(s.driver_name == user.name for s in o.shipments)]
    elif tab == "pending":
        queue = QUEUES[user.role]
        base = [o for o in base if o.status in queue]
    return [o for o in base if matches_search(o, search)]


def pending_counts(orders: Iterable[SalesOrder]) -> Dict[Role, int]:
    orders = list(orders)
    return {role: sum(1 for o in orders if o.status in statuses) for role, statuses in QUEUES.items()}


def notification_count(orders: Iterable[SalesOrder], role: Role) -> Optional[int]:
    """Queue size for the banner, or None when the role has no queue or nothing is waiting."""
    if role not in QUEUES:
        return None
    count = pending_counts(orders)[role]
    return count or None
