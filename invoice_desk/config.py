"""
Configuration management for Invoice Desk.

Loads settings from environment variables with sensible defaults.
A ``.env`` file in the working directory is honoured via python-dotenv.
"""
from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class InvoiceDeskConfig:
    """Configuration settings for Invoice Desk."""

    # Local record store (SQLite file path, or ":memory:")
    db_path: str = field(
        default_factory=lambda: os.getenv("INVOICE_DB_PATH", "invoice_desk.db")
    )

    # Invoice defaults
    default_currency: str = field(
        default_factory=lambda: os.getenv("INVOICE_DEFAULT_CURRENCY", "USD").upper()
    )
    # When enabled, two invoices may not share an invoice number
    unique_invoice_numbers: bool = field(
        default_factory=lambda: _env_bool("INVOICE_UNIQUE_NUMBERS", "true")
    )

    # Exchange rate provider
    rates_api_url: str = field(
        default_factory=lambda: os.getenv(
            "RATES_API_URL", "https://api.exchangerate-api.com/v4"
        )
    )
    rates_api_key: Optional[str] = field(
        default_factory=lambda: os.getenv("RATES_API_KEY")
    )
    request_timeout: int = field(
        default_factory=lambda: int(os.getenv("RATES_REQUEST_TIMEOUT", "10"))
    )
    retry_attempts: int = field(
        default_factory=lambda: int(os.getenv("RATES_RETRY_ATTEMPTS", "3"))
    )
    retry_delay: float = field(
        default_factory=lambda: float(os.getenv("RATES_RETRY_DELAY", "1.0"))
    )

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_file: Optional[str] = field(
        default_factory=lambda: os.getenv("INVOICE_LOG_FILE")
    )

    @classmethod
    def from_env(cls) -> "InvoiceDeskConfig":
        """Create config from environment variables."""
        return cls()

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []
        if not self.db_path:
            errors.append("INVOICE_DB_PATH is required")
        if len(self.default_currency) != 3 or not self.default_currency.isalpha():
            errors.append("INVOICE_DEFAULT_CURRENCY must be a 3-letter currency code")
        if not self.rates_api_url:
            errors.append("RATES_API_URL is required")
        if self.retry_attempts < 1:
            errors.append("RATES_RETRY_ATTEMPTS must be at least 1")
        return errors
