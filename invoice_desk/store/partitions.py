"""
Partition definitions for the local record store.

Each partition is keyed by the record's ``id`` field and declares its
secondary indexes as ``index name -> record field``.
"""
from __future__ import annotations
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Partition:
    name: str
    indexes: dict[str, str] = field(default_factory=dict)
    key_field: str = "id"


CUSTOMERS = Partition(
    "customers",
    {
        "by_name": "name",
        "by_email": "email",
        "by_created_at": "created_at",
    },
)

INVOICES = Partition(
    "invoices",
    {
        "by_invoice_number": "invoice_number",
        "by_date": "invoice_date",
        "by_status": "status",
        "by_customer_name": "customer_name",
    },
)

DEFAULT_PARTITIONS = (CUSTOMERS, INVOICES)
