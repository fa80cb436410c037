"""
Application settings loaded from the environment (and ``.env``).

Each section has its own prefix: ``STORAGE_`` for the SQLite file and pool,
``INVENTORY_`` for ledger and reorder policy, ``API_`` for the HTTP server.
"""

from decimal import Decimal
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Where the ledger database lives and how it is pooled."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "stockledger.db"

    pool_size: int = Field(default=5, ge=1)
    busy_timeout: int = Field(default=30000, ge=0)  # ms a writer waits for the lock

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class InventorySettings(BaseSettings):
    """Ledger and reorder workflow policy."""

    model_config = SettingsConfigDict(env_prefix="INVENTORY_")

    # Largest absolute quantity one ADJUSTMENT may carry; None = unbounded
    adjustment_limit: Decimal | None = None
    # Apply the no-negative-stock floor to ADJUSTMENT as well
    adjustment_floor_enabled: bool = False

    # high band = min * multiplier when a material has no max level
    high_stock_multiplier: Decimal = Field(default=Decimal("2"), gt=0)
    # suggested reorder = min * multiplier - current stock
    reorder_target_multiplier: Decimal = Field(default=Decimal("2"), gt=0)

    approver_roles: list[str] = ["ADMIN", "SUPERVISOR"]
    allow_duplicate_pending: bool = False

    @field_validator("adjustment_limit")
    @classmethod
    def positive_limit(cls, v: Decimal | None) -> Decimal | None:
        if v is not None and v <= 0:
            raise ValueError("adjustment_limit must be positive")
        return v

    @field_validator("approver_roles")
    @classmethod
    def normalize_roles(cls, v: list[str]) -> list[str]:
        roles = [role.strip().upper() for role in v if role.strip()]
        if not roles:
            raise ValueError("at least one approver role is required")
        return roles


class APISettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Stock Ledger"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    storage: StorageSettings = Field(default_factory=StorageSettings)
    inventory: InventorySettings = Field(default_factory=InventorySettings)
    api: APISettings = Field(default_factory=APISettings)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, read from the environment on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
