from __future__ import annotations

from typing import Optional

from pydantic import Field

from .enums import Role
from .orders import CamelModel


class UserProfile(CamelModel):
    """Portal user. The PIN is a shared 4-digit code stored as given."""
    name: str = Field(description="Display name, also used to match truck drivers to shipments")
    email: str = Field(description="Login e-mail, recorded as the order creator")
    role: Role = Field(description="Role gating the visible queue and actions")
    pin: str = Field(description="4-digit login PIN")
    phone: Optional[str] = Field(default=None, description="Contact number")

    def public_dict(self) -> dict:
        """Profile as persisted in the session key (without the PIN)."""
        data = self.to_json_dict()
        data.pop("pin", None)
        return data
