from __future__ import annotations

import random
import string
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .enums import DeliveryShift, DeliveryType, OrderStatus

HISTORY_DATE_FORMAT = "%m/%d/%Y, %I:%M:%S %p"


def new_id() -> str:
    """Random 9-character base-36 identifier. Not collision-checked."""
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=9))


def new_serial_number() -> str:
    """Display serial such as ``SO-482913``. Not collision-checked."""
    return f"SO-{random.randint(100000, 999999)}"


def history_timestamp(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).strftime(HISTORY_DATE_FORMAT)


class CamelModel(BaseModel):
    """Base model that reads and writes the camelCase keys of the stored JSON."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class OrderItem(CamelModel):
    """A single line on an order. No stock or price semantics."""
    id: str = Field(default_factory=new_id, description="Random line identifier")
    item_name: str = Field(default="", description="Product name, usually from the catalog")
    quantity: int = Field(default=1, description="Ordered quantity")
    notes: Optional[str] = Field(default=None, description="Optional line note")


class HistoryEntry(CamelModel):
    """One append-only audit record on an order."""
    role: str = Field(description="Role that performed the action")
    action: str = Field(description="Action message or reviewer note")
    date: str = Field(default_factory=history_timestamp, description="Local timestamp")
    user: Optional[str] = Field(default=None, description="Display name of the actor")


class ShipmentItem(CamelModel):
    item_name: str = Field(description="Product name as on the order line")
    quantity: int = Field(description="Quantity loaded on this shipment")


class Shipment(CamelModel):
    """One truck dispatch against an order."""
    id: str = Field(default_factory=new_id)
    driver_name: str = Field(description="Truck driver the shipment is assigned to")
    truck: Optional[str] = Field(default=None, description="Fleet plate number")
    warehouse: Optional[str] = Field(default=None, description="Loading warehouse")
    items: List[ShipmentItem] = Field(default_factory=list)
    date: str = Field(default_factory=history_timestamp)
    delivered: bool = False


class EmergencyReport(CamelModel):
    reason: str
    reported_by: Optional[str] = None
    date: str = Field(default_factory=history_timestamp)


class SalesOrder(CamelModel):
    """A sales order as stored in every backend."""
    id: Optional[str] = Field(default=None, description="Random identifier, assigned on submit")
    serial_number: str = Field(default="", description="Display serial, assigned on submit")
    customer_name: str = Field(default="", description="Client name")
    area_location: str = Field(default="", description="Delivery area / address")
    order_date: str = Field(default_factory=lambda: date.today().isoformat(), description="ISO order date")
    receiving_date: str = Field(default="", description="ISO date the client expects delivery")
    delivery_shift: DeliveryShift = DeliveryShift.FIRST
    delivery_type: DeliveryType = DeliveryType.OWN_CARS
    items: List[OrderItem] = Field(default_factory=list)
    overall_notes: str = ""
    status: Optional[OrderStatus] = None
    created_by: Optional[str] = Field(default=None, description="Creator e-mail")
    creator_name: Optional[str] = None
    history: List[HistoryEntry] = Field(default_factory=list)
    shipments: List[Shipment] = Field(default_factory=list)
    emergency: Optional[EmergencyReport] = None

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    def shipped_quantities(self) -> dict[str, int]:
        """Cumulative dispatched quantity per item name."""
        shipped: dict[str, int] = {}
        for shipment in self.shipments:
            for line in shipment.items:
                shipped[line.item_name] = shipped.get(line.item_name, 0) + line.quantity
        return shipped

    def remaining_quantities(self) -> dict[str, int]:
        """Ordered minus dispatched quantity per item name (never negative)."""
        ordered: dict[str, int] = {}
        for item in self.items:
            ordered[item.item_name] = ordered.get(item.item_name, 0) + item.quantity
        shipped = self.shipped_quantities()
        return {name: max(qty - shipped.get(name, 0), 0) for name, qty in ordered.items()}

    @property
    def fully_dispatched(self) -> bool:
        return all(qty == 0 for qty in self.remaining_quantities().values())
