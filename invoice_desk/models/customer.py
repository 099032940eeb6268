"""Customer schema."""
from __future__ import annotations
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field, model_validator

from .base import new_id, utcnow

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class Customer(BaseModel):
    id: str = Field(default_factory=new_id, min_length=1)
    name: str = Field(min_length=1)
    email: str = Field(pattern=EMAIL_PATTERN)
    address: str = Field(min_length=1)
    phone: Optional[str] = None
    company: Optional[str] = None
    tax_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="before")
    @classmethod
    def _stamp(cls, data: Any) -> Any:
        # New records start with matching created/updated timestamps
        if isinstance(data, dict):
            data = dict(data)
            if data.get("created_at") is None:
                data["created_at"] = utcnow()
            if data.get("updated_at") is None:
                data["updated_at"] = data["created_at"]
        return data
