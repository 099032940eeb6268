"""Exchange rate lookup and conversion of computed totals."""
from .client import RateProviderClient, RateTable
from .converter import SUPPORTED_CURRENCIES, CurrencyConverter

__all__ = ["RateProviderClient", "RateTable", "CurrencyConverter", "SUPPORTED_CURRENCIES"]
