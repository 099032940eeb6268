"""
Local record store.

Provides keyed partitions with secondary indexes for customers and invoices.
"""
from .base import RecordStore
from .partitions import CUSTOMERS, DEFAULT_PARTITIONS, INVOICES, Partition

__all__ = ["RecordStore", "Partition", "CUSTOMERS", "INVOICES", "DEFAULT_PARTITIONS"]
