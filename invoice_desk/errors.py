"""
Error taxonomy for Invoice Desk.

Logical errors (validation, duplicate keys, missing records) are recoverable
and meant to be shown to the operator. Infrastructure errors (storage, rate
provider) abandon the current operation.
"""
from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation problem."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class InvoiceDeskError(Exception):
    """Base class for all Invoice Desk errors."""
    pass


class ValidationError(InvoiceDeskError):
    """Raised when a record fails schema validation.

    Carries every field-level problem found, not only the first one.
    """

    def __init__(self, errors: list[FieldError], message: str | None = None):
        self.errors = list(errors)
        super().__init__(message or "; ".join(str(e) for e in self.errors))


class ImportParseError(ValidationError):
    """Raised when bulk import input cannot be read as rows at all."""

    def __init__(self, message: str):
        super().__init__([FieldError("file", message)], message)


class DuplicateKeyError(InvoiceDeskError):
    """Raised when adding a record whose identifier already exists."""

    def __init__(self, partition: str, key: str):
        self.partition = partition
        self.key = key
        super().__init__(f"Record {key!r} already exists in {partition}")


class DuplicateInvoiceNumberError(DuplicateKeyError):
    """Raised when an invoice number is already taken and uniqueness is enforced."""

    def __init__(self, invoice_number: str):
        super().__init__("invoices", invoice_number)
        self.args = (f"Invoice number {invoice_number!r} is already in use",)


class NotFoundError(InvoiceDeskError):
    """Raised when updating a record that does not exist."""

    def __init__(self, partition: str, key: str):
        self.partition = partition
        self.key = key
        super().__init__(f"Record {key!r} not found in {partition}")


class StorageUnavailableError(InvoiceDeskError):
    """Raised when the local store cannot be opened, read or written."""
    pass


class ProviderUnavailableError(InvoiceDeskError):
    """Raised when the exchange rate provider cannot be reached or answers badly."""
    pass


class RateUnavailableError(InvoiceDeskError):
    """Raised when the provider's rate table has no entry for the target currency."""

    def __init__(self, source: str, target: str):
        self.source = source
        self.target = target
        super().__init__(f"Exchange rate not found for {source} -> {target}")
