from __future__ import annotations

from typing import Iterable

import pandas as pd

from .models import SalesOrder

EXPORT_COLUMNS = [
    "serial_number", "status", "customer_name", "area_location", "order_date",
    "receiving_date", "delivery_shift", "delivery_type", "item_name", "quantity",
    "item_notes", "overall_notes", "creator_name",
]


def orders_to_frame(orders: Iterable[SalesOrder]) -> pd.DataFrame:
    """One row per line item; orders without items still get a single row."""
    rows = []
    for o in orders:
        base = {
            "serial_number": o.serial_number,
            "status": o.status.value if o.status else "",
            "customer_name": o.customer_name,
            "area_location": o.area_location,
            "order_date": o.order_date,
            "receiving_date": o.receiving_date,
            "delivery_shift": o.delivery_shift.value,
            "delivery_type": o.delivery_type.value,
            "overall_notes": o.overall_notes,
            "creator_name": o.creator_name or "",
        }
        if not o.items:
            rows.append({**base, "item_name": "", "quantity": 0, "item_notes": ""})
        for item in o.items:
            rows.append({**base, "item_name": item.item_name, "quantity": item.quantity, "item_notes": item.notes or ""})
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def orders_to_csv(orders: Iterable[SalesOrder]) -> bytes:
    # BOM prefix: Excel needs it to detect UTF-8
    return orders_to_frame(orders).to_csv(index=False).encode("utf-8-sig")
