"""
Invoice and item schemas.

An invoice carries a value copy of the customer's name, email and address
taken when it was issued; later customer edits do not flow into it. Items
have no life of their own outside their invoice.
"""
from __future__ import annotations
from datetime import date, datetime
from enum import Enum
from typing import Any
from pydantic import BaseModel, Field, model_validator

from .base import new_id, utcnow


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    UNPAID = "unpaid"
    OVERDUE = "overdue"


class InvoiceItem(BaseModel):
    id: str = Field(default_factory=new_id, min_length=1)
    name: str = ""
    description: str = Field(min_length=1)
    quantity: int = Field(ge=1)
    unit_price: float = Field(ge=0)
    tax_rate: float = Field(default=0.0, ge=0, le=100)   # percent
    # Derived from quantity / unit_price / tax_rate
    subtotal: float = 0.0
    tax_amount: float = 0.0
    total: float = 0.0


class Invoice(BaseModel):
    id: str = Field(default_factory=new_id, min_length=1)
    invoice_number: str = Field(min_length=1)
    customer_name: str = Field(min_length=1)
    customer_email: str = ""
    customer_address: str = ""
    invoice_date: date
    due_date: date
    currency: str = Field(default="USD", pattern=r"^[A-Z]{3}$")
    notes: str = ""
    status: InvoiceStatus = InvoiceStatus.DRAFT
    items: list[InvoiceItem] = Field(default_factory=list)
    # Derived from items
    subtotal: float = 0.0
    tax_total: float = 0.0
    grand_total: float = 0.0
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="before")
    @classmethod
    def _stamp(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            if data.get("created_at") is None:
                data["created_at"] = utcnow()
            if data.get("updated_at") is None:
                data["updated_at"] = data["created_at"]
        return data

    @model_validator(mode="after")
    def _unique_item_ids(self) -> "Invoice":
        seen = set()
        for item in self.items:
            if item.id in seen:
                raise ValueError(f"duplicate item id {item.id!r}")
            seen.add(item.id)
        return self
