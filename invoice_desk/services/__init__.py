"""Customer and invoice repositories over the record store."""
from .customers import CustomerService
from .invoices import InvoiceService

__all__ = ["CustomerService", "InvoiceService"]
