"""
Customer records.

Handles creation, merging updates and lookups of customers in the
``customers`` partition.
"""
from __future__ import annotations
from typing import Any, Mapping, Optional
from loguru import logger

from ..errors import FieldError, NotFoundError, ValidationError
from ..models import Customer, load_model, new_id, next_timestamp, utcnow
from ..store import CUSTOMERS, RecordStore

# Managed by the service, never taken from caller input
_SYSTEM_FIELDS = ("id", "created_at", "updated_at")


def _user_fields(data: Mapping[str, Any]) -> dict:
    return {k: v for k, v in data.items() if k not in _SYSTEM_FIELDS}


class CustomerService:
    """Repository for customers backed by a ``RecordStore``."""

    partition = CUSTOMERS.name

    def __init__(self, store: RecordStore):
        self.store = store

    def list(self) -> list[Customer]:
        return [Customer.model_validate(r) for r in self.store.get_all(self.partition)]

    def get(self, customer_id: str) -> Optional[Customer]:
        record = self.store.get(self.partition, customer_id)
        return Customer.model_validate(record) if record else None

    def create(self, data: Mapping[str, Any]) -> Customer:
        """
        Create a customer with a fresh identifier and timestamps.

        Raises:
            ValidationError: If required fields are missing or malformed
        """
        now = utcnow()
        customer = load_model(
            Customer,
            {**_user_fields(data), "id": new_id(), "created_at": now, "updated_at": now},
        )
        self.store.add(self.partition, customer.model_dump(mode="json"))
        logger.info(f"Created customer {customer.id} ({customer.name})")
        return customer

    def update(self, customer_id: str, changes: Mapping[str, Any]) -> Customer:
        """
        Merge ``changes`` into an existing customer and bump ``updated_at``.

        Raises:
            NotFoundError: If the customer does not exist
            ValidationError: If the merged record is invalid or the id changes
        """
        existing = self.get(customer_id)
        if existing is None:
            raise NotFoundError(self.partition, customer_id)
        if changes.get("id") not in (None, existing.id):
            raise ValidationError([FieldError("id", "identifier cannot be changed")])

        merged = {
            **existing.model_dump(),
            **_user_fields(changes),
            "id": existing.id,
            "created_at": existing.created_at,
            "updated_at": next_timestamp(existing.updated_at),
        }
        customer = load_model(Customer, merged)
        self.store.put(self.partition, customer.model_dump(mode="json"))
        logger.info(f"Updated customer {customer.id}")
        return customer

    def delete(self, customer_id: str) -> None:
        self.store.delete(self.partition, customer_id)

    def find_by_email(self, email: str) -> list[Customer]:
        return [
            Customer.model_validate(r)
            for r in self.store.query_by_index(self.partition, "by_email", email)
        ]

    def find_by_name(self, name: str) -> list[Customer]:
        return [
            Customer.model_validate(r)
            for r in self.store.query_by_index(self.partition, "by_name", name)
        ]

    def search(self, query: str) -> list[Customer]:
        """Case-insensitive substring search over name, email and company."""
        term = query.strip().lower()
        if not term:
            return self.list()
        return [
            c for c in self.list()
            if term in c.name.lower()
            or term in c.email.lower()
            or (c.company and term in c.company.lower())
        ]
