"""
Currency conversion of computed totals.

Converted figures are for display only; invoices are never modified.
"""
from __future__ import annotations
from datetime import date
from typing import Optional
from loguru import logger

from ..errors import RateUnavailableError
from ..models import Invoice
from .client import RateProviderClient

SUPPORTED_CURRENCIES = (
    "USD", "EUR", "GBP", "JPY", "AUD", "CAD", "CHF", "CNY", "INR", "SGD",
    "NZD", "MXN", "HKD", "TRY", "KRW", "RUB", "BRL", "ZAR", "SEK", "NOK",
)


class CurrencyConverter:
    def __init__(self, client: RateProviderClient):
        self.client = client

    def rate(self, source: str, target: str, as_of: Optional[date] = None) -> float:
        """
        Look up the multiplier from ``source`` to ``target``.

        Raises:
            RateUnavailableError: If the provider has no rate for ``target``
            ProviderUnavailableError: If the provider call fails
        """
        source, target = source.upper(), target.upper()
        if source == target:
            return 1.0
        table = (
            self.client.historical_rates(source, as_of)
            if as_of
            else self.client.latest_rates(source)
        )
        rate = table.rates.get(target)
        if rate is None:
            logger.warning(f"No {target} rate in {source} table dated {table.date}")
            raise RateUnavailableError(source, target)
        return rate

    def convert(
        self,
        amount: float,
        source: str,
        target: str,
        as_of: Optional[date] = None,
    ) -> float:
        """Convert ``amount`` from ``source`` into ``target`` currency."""
        return amount * self.rate(source, target, as_of)

    def convert_invoice_total(
        self,
        invoice: Invoice,
        target: str,
        as_of: Optional[date] = None,
    ) -> float:
        """Convert an invoice's grand total into ``target`` currency."""
        return self.convert(invoice.grand_total, invoice.currency, target, as_of)
