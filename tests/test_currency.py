"""
Tests for exchange rate lookup and conversion.
"""
from datetime import date
from unittest.mock import Mock
import pytest
import requests
from invoice_desk.currency import CurrencyConverter, RateProviderClient
from invoice_desk.errors import ProviderUnavailableError, RateUnavailableError
from invoice_desk.models import Invoice


def _session(payload=None, status_error=None, get_error=None):
    session = Mock()
    session.headers = {}
    response = Mock()
    response.json.return_value = payload
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    session.get.return_value = response
    if get_error is not None:
        session.get.side_effect = get_error
    return session


RATES = {"base": "USD", "date": "2024-03-15", "rates": {"EUR": 0.9, "GBP": 0.8}}


class TestRateProviderClient:
    """Tests for the HTTP client."""

    def test_latest_rates(self, config):
        session = _session(RATES)
        table = RateProviderClient(config, session).latest_rates("usd")
        assert table.base == "USD"
        assert table.rates["EUR"] == 0.9
        url = session.get.call_args.args[0]
        assert url == "https://rates.example.test/v4/latest/USD"

    def test_historical_rates(self, config):
        session = _session(RATES)
        RateProviderClient(config, session).historical_rates("USD", date(2024, 3, 15))
        args, kwargs = session.get.call_args
        assert args[0] == "https://rates.example.test/v4/2024-03-15"
        assert kwargs["params"]["base"] == "USD"
        assert kwargs["timeout"] == 5

    def test_api_key_sent(self, config):
        config.rates_api_key = "secret"
        session = _session(RATES)
        RateProviderClient(config, session).latest_rates("USD")
        assert session.get.call_args.kwargs["params"] == {"apiKey": "secret"}

    def test_http_error(self, config):
        error = requests.HTTPError(response=Mock(status_code=503))
        session = _session(RATES, status_error=error)
        with pytest.raises(ProviderUnavailableError):
            RateProviderClient(config, session).latest_rates("USD")

    def test_connection_error_retried_then_raised(self, config):
        config.retry_attempts = 3
        session = _session(get_error=requests.ConnectionError("offline"))
        with pytest.raises(ProviderUnavailableError):
            RateProviderClient(config, session).latest_rates("USD")
        assert session.get.call_count == 3

    def test_malformed_body(self, config):
        session = _session({"base": "USD"})
        with pytest.raises(ProviderUnavailableError):
            RateProviderClient(config, session).latest_rates("USD")

    def test_non_json_body(self, config):
        session = _session()
        session.get.return_value.json.side_effect = ValueError("no json")
        with pytest.raises(ProviderUnavailableError):
            RateProviderClient(config, session).latest_rates("USD")


class TestCurrencyConverter:
    """Tests for conversion of computed totals."""

    def test_convert(self, config):
        converter = CurrencyConverter(RateProviderClient(config, _session(RATES)))
        assert converter.convert(220, "USD", "EUR") == pytest.approx(198)

    def test_missing_rate(self, config):
        payload = {"base": "USD", "date": "2024-03-15", "rates": {"GBP": 0.8}}
        converter = CurrencyConverter(RateProviderClient(config, _session(payload)))
        with pytest.raises(RateUnavailableError):
            converter.convert(220, "USD", "EUR")

    def test_same_currency_skips_provider(self, config):
        session = _session(RATES)
        converter = CurrencyConverter(RateProviderClient(config, session))
        assert converter.convert(42.5, "usd", "USD") == 42.5
        session.get.assert_not_called()

    def test_historical_conversion(self, config):
        session = _session(RATES)
        converter = CurrencyConverter(RateProviderClient(config, session))
        converter.convert(10, "USD", "GBP", date(2024, 3, 15))
        assert session.get.call_args.args[0].endswith("/2024-03-15")

    def test_invoice_is_not_modified(self, config):
        invoice = Invoice(
            invoice_number="INV-1",
            customer_name="Acme",
            invoice_date="2024-03-15",
            due_date="2024-04-15",
            grand_total=220,
        )
        converter = CurrencyConverter(RateProviderClient(config, _session(RATES)))
        assert converter.convert_invoice_total(invoice, "EUR") == pytest.approx(198)
        assert invoice.grand_total == 220
        assert invoice.currency == "USD"
