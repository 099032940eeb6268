"""
Tests for configuration handling.
"""
from invoice_desk.config import InvoiceDeskConfig


class TestConfig:
    def test_config_from_env(self):
        """Test config loads from environment."""
        config = InvoiceDeskConfig.from_env()
        assert config.db_path is not None
        assert config.rates_api_url is not None

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("INVOICE_DB_PATH", "/tmp/x.db")
        monkeypatch.setenv("INVOICE_DEFAULT_CURRENCY", "eur")
        monkeypatch.setenv("INVOICE_UNIQUE_NUMBERS", "false")
        monkeypatch.setenv("RATES_RETRY_ATTEMPTS", "5")
        config = InvoiceDeskConfig.from_env()
        assert config.db_path == "/tmp/x.db"
        assert config.default_currency == "EUR"
        assert config.unique_invoice_numbers is False
        assert config.retry_attempts == 5

    def test_config_validation(self):
        """Test config validation."""
        config = InvoiceDeskConfig(db_path="", default_currency="EURO", retry_attempts=0)
        errors = config.validate()
        assert len(errors) == 3

    def test_valid_config(self, config):
        assert config.validate() == []
