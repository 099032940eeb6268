"""
HTTP client for the exchange rate provider.

The provider answers ``{"rates": {code: rate}, "base": code, "date": str}``
for a base currency, either for today (``/latest/{base}``) or for a past
date (``/{YYYY-MM-DD}?base={base}``).
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from typing import Optional
import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential
from loguru import logger

from ..config import InvoiceDeskConfig
from ..errors import ProviderUnavailableError

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "invoice-desk/1.0",
}


@dataclass(frozen=True)
class RateTable:
    base: str
    date: str
    rates: dict[str, float]


class RateProviderClient:
    """
    Client for the exchange rate API with retry logic.

    Connection errors and timeouts are retried with exponential backoff;
    anything still failing surfaces as ``ProviderUnavailableError``.
    """

    def __init__(
        self,
        config: Optional[InvoiceDeskConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config or InvoiceDeskConfig.from_env()
        self.base_url = self.config.rates_api_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update(DEFAULT_HEADERS)

    def _retrying(self) -> Retrying:
        return Retrying(
            wait=wait_exponential(multiplier=self.config.retry_delay, min=self.config.retry_delay, max=30),
            stop=stop_after_attempt(self.config.retry_attempts),
            retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
            before_sleep=lambda retry_state: logger.warning(
                f"Retrying rate request (attempt {retry_state.attempt_number})..."
            ),
            reraise=True,
        )

    def _params(self, extra: Optional[dict] = None) -> dict:
        params = dict(extra or {})
        if self.config.rates_api_key:
            params["apiKey"] = self.config.rates_api_key
        return params

    def _get(self, url: str, params: dict) -> requests.Response:
        r = self.session.get(url, params=params, timeout=self.config.request_timeout)
        r.raise_for_status()
        return r

    def _fetch(self, url: str, params: dict) -> RateTable:
        try:
            response = self._retrying()(self._get, url, params)
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            logger.error(f"Rate provider returned HTTP {status} for {url}")
            raise ProviderUnavailableError(f"Failed to fetch exchange rates (HTTP {status})") from e
        except requests.Timeout as e:
            logger.error(f"Rate request timed out after {self.config.request_timeout}s")
            raise ProviderUnavailableError(f"Request timeout: {e}") from e
        except requests.RequestException as e:
            logger.error(f"Failed to reach rate provider at {self.base_url}: {e}")
            raise ProviderUnavailableError(f"Cannot reach rate provider: {e}") from e

        try:
            payload = response.json()
            rates = {str(k).upper(): float(v) for k, v in payload["rates"].items()}
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise ProviderUnavailableError(f"Malformed rate response: {e}") from e

        return RateTable(
            base=str(payload.get("base", "")).upper(),
            date=str(payload.get("date", "")),
            rates=rates,
        )

    def latest_rates(self, base_currency: str) -> RateTable:
        """Fetch today's rate table for ``base_currency``."""
        base_currency = base_currency.upper()
        logger.debug(f"Fetching latest rates for {base_currency}")
        return self._fetch(f"{self.base_url}/latest/{base_currency}", self._params())

    def historical_rates(self, base_currency: str, as_of: date) -> RateTable:
        """Fetch the rate table for ``base_currency`` as it was on ``as_of``."""
        base_currency = base_currency.upper()
        logger.debug(f"Fetching {as_of.isoformat()} rates for {base_currency}")
        return self._fetch(
            f"{self.base_url}/{as_of.isoformat()}",
            self._params({"base": base_currency}),
        )

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
