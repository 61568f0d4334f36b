from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Closed set of portal roles. Each role sees its own queue and actions."""
    SALES = "sales"
    ASSISTANT = "assistant"
    FINANCE = "finance"
    WAREHOUSE = "warehouse"
    DRIVER_SUPERVISOR = "driver_supervisor"
    TRUCK_DRIVER = "truck_driver"


class OrderStatus(str, Enum):
    """Workflow stage of a sales order.

    Main path:
        PENDING_ASSISTANT -> PENDING_FINANCE -> APPROVED -> READY_FOR_DRIVER
        -> (PARTIALLY_SHIPPED -> IN_TRANSIT) -> COMPLETED

    Side exits: REJECTED, ON_HOLD, CANCELED, EMERGENCY.
    """
    PENDING_ASSISTANT = "Pending Assistant"
    PENDING_FINANCE = "Pending Finance"
    APPROVED = "Approved"
    READY_FOR_DRIVER = "Ready for Driver"
    PARTIALLY_SHIPPED = "Partially Shipped"
    IN_TRANSIT = "In Transit"
    COMPLETED = "Completed"
    REJECTED = "Rejected"
    ON_HOLD = "On Hold"
    EMERGENCY = "Emergency"
    CANCELED = "Canceled"


TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.REJECTED, OrderStatus.CANCELED})


class DeliveryShift(str, Enum):
    FIRST = "أول نقلة"
    SECOND = "ثانى نقلة"
    NIGHT = "نقلة ليلية"


class DeliveryType(str, Enum):
    OWN_CARS = "Own Cars"
    CUSTOMER_PICKUP = "Customer Pickup"
    RENTED_CARS = "Rented Cars"
