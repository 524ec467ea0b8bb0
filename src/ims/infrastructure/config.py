"""Runtime settings, read from ``IMS_*`` environment variables or ``.env``."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


class Settings(BaseSettings):
    # =========================================================================
    # Storage
    # =========================================================================
    DATA_DIR: Path = Field(default=_DEFAULT_DATA_DIR)

    # =========================================================================
    # Ledger policy
    # =========================================================================
    ALLOW_OVER_FULFILLMENT: bool = Field(
        default=False,
        description="Accept receipts/deliveries beyond the ordered quantity",
    )
    DEFAULT_MIN_STOCK: Decimal = Field(default=Decimal("10"), ge=0)
    DEFAULT_MAX_STOCK: Decimal = Field(default=Decimal("1000"), ge=0)

    # =========================================================================
    # Logging
    # =========================================================================
    LOG_LEVEL: str = Field(default="WARNING")
    LOG_FILE: Path | None = Field(default=None)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="IMS_",
        case_sensitive=False,
        extra="ignore",
    )


def get_settings() -> Settings:
    return Settings()
