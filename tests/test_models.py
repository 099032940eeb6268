"""
Tests for entity schemas.
"""
from datetime import date
import pytest
from invoice_desk.errors import ValidationError
from invoice_desk.models import (
    Customer,
    Invoice,
    InvoiceStatus,
    load_model,
    validate_customer,
    validate_invoice,
    validate_item,
)


class TestCustomerSchema:
    def test_valid_customer_has_no_errors(self):
        assert validate_customer(
            {"name": "Acme", "email": "billing@acme.test", "address": "1 Road"}
        ) == []

    def test_all_problems_reported_together(self):
        """Missing name, bad email and missing address are reported at once."""
        errors = validate_customer({"email": "not-an-email"})
        fields = {e.field for e in errors}
        assert {"name", "email", "address"} <= fields

    def test_new_customer_timestamps_match(self):
        customer = Customer(name="Acme", email="a@acme.test", address="1 Road")
        assert customer.created_at == customer.updated_at
        assert customer.id


class TestInvoiceSchema:
    def test_defaults(self):
        invoice = Invoice(
            invoice_number="INV-1",
            customer_name="Acme",
            invoice_date="2024-01-01",
            due_date="2024-01-31",
        )
        assert invoice.status is InvoiceStatus.DRAFT
        assert invoice.currency == "USD"
        assert invoice.items == []

    def test_due_date_before_invoice_date_is_allowed(self):
        errors = validate_invoice(
            {
                "invoice_number": "INV-1",
                "customer_name": "Acme",
                "invoice_date": "2024-02-01",
                "due_date": "2024-01-01",
            }
        )
        assert errors == []

    def test_unknown_status_rejected(self):
        errors = validate_invoice(
            {
                "invoice_number": "INV-1",
                "customer_name": "Acme",
                "invoice_date": "2024-02-01",
                "due_date": "2024-03-01",
                "status": "archived",
            }
        )
        assert [e.field for e in errors] == ["status"]

    def test_item_errors_carry_their_path(self):
        errors = validate_invoice(
            {
                "invoice_number": "INV-1",
                "customer_name": "Acme",
                "invoice_date": "2024-02-01",
                "due_date": "2024-03-01",
                "items": [{"description": "A", "quantity": 0, "unit_price": 1}],
            }
        )
        assert [e.field for e in errors] == ["items.0.quantity"]

    def test_duplicate_item_ids_rejected(self):
        with pytest.raises(ValidationError):
            load_model(
                Invoice,
                {
                    "invoice_number": "INV-1",
                    "customer_name": "Acme",
                    "invoice_date": date(2024, 2, 1),
                    "due_date": date(2024, 3, 1),
                    "items": [
                        {"id": "i1", "description": "A", "quantity": 1, "unit_price": 1},
                        {"id": "i1", "description": "B", "quantity": 1, "unit_price": 1},
                    ],
                },
            )


class TestItemSchema:
    @pytest.mark.parametrize(
        "changes,field",
        [
            ({"quantity": 0}, "quantity"),
            ({"quantity": 1.5}, "quantity"),
            ({"unit_price": -1}, "unit_price"),
            ({"tax_rate": 101}, "tax_rate"),
            ({"description": ""}, "description"),
        ],
    )
    def test_invalid_item_fields(self, changes, field):
        data = {"description": "A", "quantity": 1, "unit_price": 10, "tax_rate": 5}
        data.update(changes)
        assert [e.field for e in validate_item(data)] == [field]

    def test_load_model_raises_with_every_error(self):
        with pytest.raises(ValidationError) as exc_info:
            load_model(Customer, {})
        assert len(exc_info.value.errors) >= 3
