"""
Runtime settings for the storefront engine.

Values come from the environment (prefix STOREFRONT_) or a local .env file:
  - STOREFRONT_STORAGE_BACKEND: "file" (default) or "memory"
  - STOREFRONT_DATA_DIR: directory holding one file per storage key
  - STOREFRONT_SESSION_KEY / STOREFRONT_USERS_KEY / STOREFRONT_GUEST_CART_KEY
  - STOREFRONT_LOG_LEVEL
  - STOREFRONT_PASSWORD_ITERATIONS
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Storage location, key names and logging level."""

    storage_backend: Literal["file", "memory"] = "file"
    data_dir: Path = Path("data")

    # Key names used by the browser storefront, kept so its data stays readable
    session_key: str = "quddix_live_store_session"
    users_key: str = "quddix_live_store_users"
    guest_cart_key: str = "quddix_live_store_guest_cart"

    log_level: str = "INFO"
    password_iterations: int = 120_000

    model_config = SettingsConfigDict(env_prefix="STOREFRONT_", env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader."""
    return Settings()
