#!/usr/bin/env python3
"""
seed_data.py

Generates demo sales orders and writes them to the configured order store.
Every order is driven through the real workflow handlers, so statuses, shipments
and history entries look exactly like orders worked by hand.

Run:
  python -m order_portal.backend.seed_data --count 40 --seed 42 --backend local
"""

from __future__ import annotations

import argparse
import random
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from order_portal.auth.users import DEFAULT_USERS
from order_portal.config import get_config
from order_portal.data.catalog import CUSTOMER_LIST, PRODUCT_CATALOG, WAREHOUSES
from order_portal.data.models import DeliveryShift, DeliveryType, OrderItem, Role, SalesOrder, UserProfile
from order_portal.data.sync import OrderSync
from order_portal.data.util import get_order_store
from order_portal.logging import get_logger
from order_portal.workflow.service import OrderWorkflow

logger = get_logger(__name__)

# -----------------------------
# Lifecycle targets
# -----------------------------

# Final stage each generated order is walked to, with a relative weight.
STAGES: Dict[str, int] = {
    "pending_assistant": 6,
    "pending_finance": 5,
    "rejected": 2,
    "credit_refused": 1,
    "canceled": 1,
    "approved": 4,
    "on_hold": 2,
    "ready": 4,
    "partially_shipped": 3,
    "in_transit": 4,
    "emergency": 1,
    "completed": 7,
}

NOTES = ["", "", "", "Call before arrival", "Deliver to back gate", "Urgent for Friday"]
EMERGENCIES = ["Flat tire on the ring road", "Truck broke down", "Customer site closed"]

# sharepoint_mock lives in memory only, so seeding it would persist nothing.
SEEDABLE_BACKENDS = ["local", "cloud", "sharepoint"]


class StepClock:
    """Monotonic fake clock: each call moves a few minutes forward."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(minutes=random.randint(3, 90))
        return self.now


def users_by_role() -> Dict[Role, List[UserProfile]]:
    grouped: Dict[Role, List[UserProfile]] = {}
    for user in DEFAULT_USERS:
        grouped.setdefault(user.role, []).append(user)
    return grouped


def gen_draft(order_day: datetime) -> SalesOrder:
    customer = random.choice(CUSTOMER_LIST)
    products = random.sample(PRODUCT_CATALOG, k=random.randint(1, 4))
    return SalesOrder(
        customer_name=customer.name,
        area_location=customer.location,
        order_date=order_day.date().isoformat(),
        receiving_date=(order_day + timedelta(days=random.randint(1, 3))).date().isoformat(),
        delivery_shift=random.choice(list(DeliveryShift)),
        delivery_type=random.choice(list(DeliveryType)),
        items=[OrderItem(item_name=p, quantity=random.choice([5, 10, 20, 25, 40, 50])) for p in products],
        overall_notes=random.choice(NOTES),
    )


def walk_order(workflow: OrderWorkflow, draft: SalesOrder, stage: str, users: Dict[Role, List[UserProfile]]) -> SalesOrder:
    """Create ``draft`` and push it through the handlers until it reaches ``stage``."""
    sales = random.choice(users[Role.SALES])
    assistant = users[Role.ASSISTANT][0]
    finance = users[Role.FINANCE][0]
    warehouse = users[Role.WAREHOUSE][0]
    supervisor = users[Role.DRIVER_SUPERVISOR][0]
    driver = random.choice(users[Role.TRUCK_DRIVER])

    order = workflow.submit_order(draft, sales)
    if stage == "pending_assistant":
        return order
    if stage == "canceled":
        return workflow.cancel(order.id, sales)
    if stage == "rejected":
        return workflow.reject(order.id, assistant, "Customer account blocked")
    order = workflow.approve_quantities(order.id, assistant)
    if stage == "pending_finance":
        return order
    if stage == "credit_refused":
        return workflow.refuse_credit(order.id, finance)
    order = workflow.approve(order.id, finance)
    if stage == "approved":
        return order
    if stage == "on_hold":
        return workflow.put_on_hold(order.id, warehouse, "Waiting for stock")
    order = workflow.mark_ready(order.id, warehouse)
    if stage == "ready":
        return order

    remaining = order.remaining_quantities()
    if stage == "partially_shipped":
        quantities = {name: max(1, qty // 2) for name, qty in remaining.items()}
    else:
        quantities = dict(remaining)
    order = workflow.dispatch(order.id, supervisor, driver.name, quantities, warehouse=random.choice(WAREHOUSES))
    if stage in ("partially_shipped", "in_transit"):
        return order
    if stage == "emergency":
        return workflow.report_emergency(order.id, driver, random.choice(EMERGENCIES))
    return workflow.confirm_delivery(order.id, driver)


# -----------------------------
# Main
# -----------------------------

def main(argv: Optional[List[str]] = None) -> int:
    config = get_config()

    parser = argparse.ArgumentParser(description="Generate demo sales orders into the order store.")
    parser.add_argument("--count", type=int, default=config.default_seed_count, help="Number of orders to generate.")
    parser.add_argument("--seed", type=int, default=config.default_seed_value)
    parser.add_argument(
        "--backend",
        choices=SEEDABLE_BACKENDS,
        default=config.storage_backend,
        help="Order store to write to (defaults to the configured one).",
    )
    args = parser.parse_args(argv)
    if args.backend not in SEEDABLE_BACKENDS:
        # The configured default is not checked against choices.
        parser.error(f"cannot seed the '{args.backend}' store: it keeps nothing after the process exits")

    random.seed(args.seed)

    sync = OrderSync(get_order_store(args.backend))
    sync.refresh()
    workflow = OrderWorkflow(sync, clock=StepClock(datetime.now() - timedelta(days=14)))
    users = users_by_role()

    stages = random.choices(list(STAGES), weights=list(STAGES.values()), k=args.count)
    tally: Dict[str, int] = {}
    for stage in stages:
        order_day = workflow.clock()
        walk_order(workflow, gen_draft(order_day), stage, users)
        tally[stage] = tally.get(stage, 0) + 1

    # simple summary
    logger.info(f"Generated {args.count} orders into the '{args.backend}' store ({len(sync.orders)} total)")
    for stage, n in sorted(tally.items()):
        logger.info(f" {stage}: {n}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
