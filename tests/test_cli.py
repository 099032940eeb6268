"""
Tests for the command-line interface.
"""
from unittest.mock import patch
import pytest
from invoice_desk.cli import main
from invoice_desk.errors import ProviderUnavailableError
from invoice_desk.store import RecordStore


class TestCli:
    def test_template_then_import_then_list(self, tmp_path, capsys):
        db = tmp_path / "invoices.db"
        template = tmp_path / "template.csv"

        assert main(["template", str(template)]) == 0
        assert main(["--db", str(db), "import", str(template)]) == 0
        assert "1 invoices created successfully" in capsys.readouterr().out

        assert main(["--db", str(db), "list", "--status", "draft"]) == 0
        out = capsys.readouterr().out
        assert "INV-001" in out
        assert "1650.00" in out

        with RecordStore(db) as store:
            assert store.count("invoices") == 1

    def test_rejected_import_exits_nonzero(self, tmp_path, capsys, make_csv, import_row):
        db = tmp_path / "invoices.db"
        path = tmp_path / "bad.csv"
        path.write_text(make_csv([import_row(customer="")]), encoding="utf-8")
        assert main(["--db", str(db), "import", str(path)]) == 1
        assert "Row 1" in capsys.readouterr().out

    def test_unreadable_import_exits_nonzero(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")
        assert main(["--db", str(tmp_path / "x.db"), "import", str(path)]) == 1

    def test_export(self, tmp_path):
        db = tmp_path / "invoices.db"
        template = tmp_path / "template.csv"
        main(["template", str(template)])
        main(["--db", str(db), "import", str(template)])
        out = tmp_path / "export.csv"
        assert main(["--db", str(db), "export", str(out)]) == 0
        assert "1650.00" in out.read_text(encoding="utf-8")

    def test_convert_provider_down(self):
        with patch(
            "invoice_desk.cli.CurrencyConverter.convert",
            side_effect=ProviderUnavailableError("offline"),
        ):
            assert main(["convert", "220", "USD", "EUR"]) == 1

    def test_convert(self, capsys):
        with patch("invoice_desk.cli.CurrencyConverter.convert", return_value=198.0):
            assert main(["convert", "220", "USD", "EUR"]) == 0
        assert "198.00 EUR" in capsys.readouterr().out

    def test_convert_accepts_lowercase_codes(self, capsys):
        with patch("invoice_desk.cli.CurrencyConverter.convert", return_value=198.0) as convert:
            assert main(["convert", "220", "usd", "eur"]) == 0
        assert convert.call_args.args[1:3] == ("USD", "EUR")

    def test_convert_rejects_unsupported_currency(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["convert", "220", "USD", "XYZ"])
        assert exc_info.value.code == 2

    def test_list_by_customer(self, tmp_path, capsys):
        db = tmp_path / "invoices.db"
        template = tmp_path / "template.csv"
        main(["template", str(template)])
        main(["--db", str(db), "import", str(template)])
        capsys.readouterr()

        assert main(["--db", str(db), "list", "--customer", "John Doe"]) == 0
        assert "INV-001" in capsys.readouterr().out
        assert main(["--db", str(db), "list", "--customer", "Jane Roe"]) == 0
        assert capsys.readouterr().out.strip() == "0 invoices"
