from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

from order_portal.config import get_config
from order_portal.data.local_storage import LocalStorage
from order_portal.data.models import UserProfile
from order_portal.errors import StorageError
from order_portal.logging import get_logger


class SessionStore:
    """Signed-in profile and UI language, persisted under their storage keys."""

    def __init__(self, storage: LocalStorage = None) -> None:
        config = get_config()
        self.storage = storage or LocalStorage()
        self.session_key = config.session_key
        self.language_key = config.language_key
        self.default_language = config.default_language
        self.logger = get_logger(__name__)

    def load_user(self) -> Optional[UserProfile]:
        try:
            data = self.storage.get_json(self.session_key)
            if not data:
                return None
            if not isinstance(data, dict):
                raise StorageError("session is not a JSON object")
            return UserProfile.model_validate({**data, "pin": data.get("pin", "")})
        except (StorageError, ValidationError) as e:
            self.logger.warning(f"Discarding unreadable session: {e}")
            self.storage.remove_item(self.session_key)
            return None

    def save_user(self, user: Optional[UserProfile]) -> None:
        if user is None:
            self.storage.remove_item(self.session_key)
        else:
            self.storage.set_json(self.session_key, user.public_dict())

    def load_language(self) -> str:
        try:
            lang = self.storage.get_item(self.language_key)
        except StorageError as e:
            self.logger.warning(f"Falling back to default language: {e}")
            return self.default_language
        return lang if lang in ("ar", "en") else self.default_language

    def save_language(self, lang: str) -> None:
        if lang not in ("ar", "en"):
            raise ValueError(f"Unsupported language: {lang}")
        self.storage.set_item(self.language_key, lang)
