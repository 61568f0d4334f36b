from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import ValidationError

from order_portal.config import get_config
from order_portal.data.models import Role, UserProfile
from order_portal.errors import InvalidCredentialsError
from order_portal.logging import get_logger

DEFAULT_USERS: List[UserProfile] = [
    UserProfile(name="Omar Khaled", email="omar.sales@ifcg.example", role=Role.SALES, pin="1111"),
    UserProfile(name="Youssef Nabil", email="youssef.sales@ifcg.example", role=Role.SALES, pin="1112"),
    UserProfile(name="Mona Said", email="mona.support@ifcg.example", role=Role.ASSISTANT, pin="2222"),
    UserProfile(name="Tarek Fawzy", email="tarek.finance@ifcg.example", role=Role.FINANCE, pin="3333"),
    UserProfile(name="Sherif Lotfy", email="sherif.wh@ifcg.example", role=Role.WAREHOUSE, pin="4444"),
    UserProfile(name="Hany Mostafa", email="hany.fleet@ifcg.example", role=Role.DRIVER_SUPERVISOR, pin="5555"),
    UserProfile(name="Mahmoud Adel", email="mahmoud.driver@ifcg.example", role=Role.TRUCK_DRIVER, pin="6661"),
    UserProfile(name="Hassan Fathy", email="hassan.driver@ifcg.example", role=Role.TRUCK_DRIVER, pin="6662"),
]


def load_users(path: str | Path) -> List[UserProfile]:
    """Read a JSON list of user profiles (camelCase or snake_case keys)."""
    try:
        rows = json.loads(Path(path).read_text(encoding="utf-8"))
        return [UserProfile.model_validate(row) for row in rows]
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise ValueError(f"Could not load users from {path}: {e}") from e


class UserDirectory:
    """PIN lookup over a fixed set of users. No hashing, no rate limiting."""

    def __init__(self, users: Optional[Iterable[UserProfile]] = None) -> None:
        self.logger = get_logger(__name__)
        if users is None:
            users_file = get_config().users_file
            users = load_users(users_file) if users_file else DEFAULT_USERS
        self.users = list(users)

    def get_user_by_pin(self, pin: str) -> Optional[UserProfile]:
        pin = (pin or "").strip()
        return next((u for u in self.users if u.pin == pin), None)

    def login(self, role: Role, pin: str) -> UserProfile:
        """Return the user when the PIN exists and belongs to ``role``."""
        user = self.get_user_by_pin(pin)
        if user is None or user.role != role:
            self.logger.warning(f"Rejected login attempt for role '{role.value}'")
            raise InvalidCredentialsError("Invalid code for the selected role")
        self.logger.info(f"{user.name} signed in as {role.value}")
        return user

    def drivers(self) -> List[UserProfile]:
        return [u for u in self.users if u.role == Role.TRUCK_DRIVER]
