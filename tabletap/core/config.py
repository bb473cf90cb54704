"""Application configuration."""
from decimal import Decimal
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./tabletap.db"

    # Restaurant
    restaurant_id: str = "default"
    restaurant_name: str = "Restaurant"
    tax_rate: Decimal = Decimal("0.10")
    currency: str = "USD"

    # Menu catalog (YAML); the bundled menu is used when unset
    menu_file: Optional[str] = None

    # Cart storage
    cart_storage_dir: str = ".carts"
    cart_storage_key: str = "tabletap_cart"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
