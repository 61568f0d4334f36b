from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class AppConfig(BaseSettings):
    """Application configuration using Pydantic BaseSettings.

    Loads configuration from environment variables and .env file (if present).
    Fields are type-checked and validated. Defaults are provided where appropriate.
    """
    # Application
    app_env: str = "local"
    log_level: str = "DEBUG"
    app_title: str = "IFCG Portal"

    # Storage
    storage_backend: Literal["local", "cloud", "sharepoint", "sharepoint_mock"] = "local"
    storage_dir: str = ".order_portal"
    orders_key: str = "ifcg_shared_db_v3"
    cloud_key: str = "ifcg_cloud_db_v1"
    session_key: str = "ifcg_user_session_v3"
    language_key: str = "ifcg_lang"
    default_language: Literal["ar", "en"] = "ar"

    # Sync
    sync_interval_seconds: int = 15
    cloud_latency_ms: int = 500

    # SharePoint
    sharepoint_site_url: Optional[str] = None
    sharepoint_list_title: str = "SalesOrders"
    sharepoint_access_token: Optional[str] = None
    sharepoint_client_id: Optional[str] = None
    sharepoint_client_secret: Optional[str] = None
    sharepoint_realm: Optional[str] = None
    sharepoint_page_size: int = 500
    request_timeout_seconds: int = 30

    # Users
    users_file: Optional[str] = None

    # AI parsing
    ai_api_key: Optional[str] = None
    ai_base_url: Optional[str] = None
    ai_model: str = "gpt-4o-mini"
    ai_temperature: float = 0.1

    # Seed data settings
    default_seed_count: int = 40
    default_seed_value: int = 42

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", env_ignore_empty=True, extra="ignore")

_config: Optional[AppConfig] = None

def get_config() -> AppConfig:
    """Return the AppConfig instance (singleton pattern)."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config

def set_config_for_test(**kwargs):
    """For testing only: override the AppConfig instance with new values."""
    global _config
    _config = AppConfig(**kwargs)
