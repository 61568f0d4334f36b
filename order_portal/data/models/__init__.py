from .enums import (
    Role,
    OrderStatus,
    DeliveryShift,
    DeliveryType,
    TERMINAL_STATUSES,
)

from .orders import (
    CamelModel,
    OrderItem,
    HistoryEntry,
    ShipmentItem,
    Shipment,
    EmergencyReport,
    SalesOrder,
    new_id,
    new_serial_number,
    history_timestamp,
)
from .users import UserProfile
from .parsed import ParsedItem, ParsedOrder

__all__ = [
    # Enums
    "Role",
    "OrderStatus",
    "DeliveryShift",
    "DeliveryType",
    "TERMINAL_STATUSES",
    # Order models
    "CamelModel",
    "OrderItem",
    "HistoryEntry",
    "ShipmentItem",
    "Shipment",
    "EmergencyReport",
    "SalesOrder",
    # Helpers
    "new_id",
    "new_serial_number",
    "history_timestamp",
    # Users
    "UserProfile",
    # AI parsing schema
    "ParsedItem",
    "ParsedOrder",
]
