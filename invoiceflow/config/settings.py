"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from decimal import Decimal
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "invoiceflow.db"

    # SQLite settings
    pool_size: int = 5
    busy_timeout: int = 30000  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class InvoiceSettings(BaseSettings):
    """Invoice numbering and GST compliance configuration."""

    model_config = SettingsConfigDict(env_prefix="INVOICE_")

    # Numbering: PREFIX-YYYY-NNNNNN
    number_prefix: str = "INV"
    sequence_padding: int = 6

    default_unit: str = "NOS"

    # Compliance thresholds (rupees)
    eway_bill_threshold: Decimal = Decimal("50000")
    e_invoice_turnover_threshold: Decimal = Decimal("50000000")  # 5 crore

    @field_validator("number_prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        v = v.strip().upper()
        if not v or "-" in v:
            raise ValueError("number_prefix must be non-empty and must not contain '-'")
        return v


class SettlementSettings(BaseSettings):
    """
    Settlement fee policy configuration.

    The processor fee and GST-on-fee percentages are policy-owned and have no
    defaults. Settlement calculation fails until both are configured.
    """

    model_config = SettingsConfigDict(env_prefix="SETTLEMENT_")

    processor_fee_percent: Decimal | None = None
    gst_on_fee_percent: Decimal | None = None

    # Create a pending settlement record when an invoice is marked paid
    settle_on_paid: bool = True

    @property
    def is_configured(self) -> bool:
        return self.processor_fee_percent is not None and self.gst_on_fee_percent is not None


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "InvoiceFlow GST Engine"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    invoice: InvoiceSettings = Field(default_factory=InvoiceSettings)
    settlement: SettlementSettings = Field(default_factory=SettlementSettings)
    api: APISettings = Field(default_factory=APISettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
