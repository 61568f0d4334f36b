from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from .orders import CamelModel


class ParsedItem(CamelModel):
    """Line item as returned by the language model."""
    item_name: str = Field(description="Catalog name closest to the text, or the name as written")
    quantity: int = Field(description="Quantity mentioned in the text")
    notes: Optional[str] = Field(default=None, description="Any remark attached to the line")


class ParsedOrder(CamelModel):
    """Fixed JSON schema expected back from the AI parsing call."""
    customer_name: str = Field(description="Client name")
    area_location: str = Field(description="Client area / location")
    order_date: Optional[str] = Field(default=None, description="YYYY-MM-DD if mentioned")
    items: List[ParsedItem] = Field(default_factory=list)
