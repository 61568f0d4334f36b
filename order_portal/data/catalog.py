"""Static reference lists used by the order form, the AI prompt and dispatch."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

PRODUCT_CATALOG: List[str] = [
    "Flour 72% Extraction 50kg",
    "Flour 82% Extraction 50kg",
    "Fino Flour 25kg",
    "Semolina Coarse 25kg",
    "Semolina Fine 25kg",
    "Bran 40kg",
    "Whole Wheat Flour 25kg",
    "Baladi Bread Flour 50kg",
    "Pastry Flour 10kg",
    "Cake Flour 10kg",
    "Pizza Flour 25kg",
    "Flour 1kg Retail Pack",
]


@dataclass(frozen=True)
class Customer:
    name: str
    location: str


CUSTOMER_LIST: List[Customer] = [
    Customer("Al Nour Bakery", "Nasr City, Cairo"),
    Customer("El Sham Bakeries", "Heliopolis, Cairo"),
    Customer("Golden Loaf", "Dokki, Giza"),
    Customer("Al Rahma Mills Outlet", "Shubra El Kheima"),
    Customer("Sweet Corner Patisserie", "Maadi, Cairo"),
    Customer("Delta Food Stores", "Tanta, Gharbia"),
    Customer("Alex Pastry House", "Smouha, Alexandria"),
    Customer("Upper Egypt Bakers", "Assiut"),
]

WAREHOUSES: List[str] = ["Main Warehouse - 10th of Ramadan", "Giza Depot", "Alexandria Depot"]


@dataclass(frozen=True)
class FleetTruck:
    driver_name: str
    truck: str


DRIVERS_FLEET: List[FleetTruck] = [
    FleetTruck("Mahmoud Adel", "ن ق ر 4821"),
    FleetTruck("Hassan Fathy", "ط ب ع 1930"),
    FleetTruck("Karim Samir", "س م ل 7754"),
    FleetTruck("Ahmed Ragab", "ع ص ف 3308"),
]


def customer_location(name: str, customers: Optional[List[Customer]] = None) -> Optional[str]:
    """Location of a known customer by exact name, used to auto-fill the form."""
    for customer in customers or CUSTOMER_LIST:
        if customer.name == name:
            return customer.location
    return None


def client_fields(name: str, area_location: str, customers: Optional[List[Customer]] = None) -> Tuple[str, str]:
    """Customer name and location after picking ``name``; an unknown client keeps the typed location."""
    return name, customer_location(name, customers) or area_location


def truck_for_driver(driver_name: str) -> Optional[str]:
    fleet: Dict[str, str] = {t.driver_name: t.truck for t in DRIVERS_FLEET}
    return fleet.get(driver_name)
