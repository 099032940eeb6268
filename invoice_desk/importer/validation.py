"""
Row validation for bulk invoice import.

Every row is checked independently and all of its problems are collected.
A row yields either ``RowOk`` carrying the typed invoice payload, or
``RowErr`` carrying its violations; nothing here raises for bad data.
"""
from __future__ import annotations
import json
import math
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Optional, Union

from ..models import InvoiceStatus
from ..models.customer import EMAIL_PATTERN
from .reader import RawRow

REQUIRED_COLUMNS = ("customerName", "invoiceNumber", "issueDate", "dueDate", "items")
OPTIONAL_COLUMNS = ("customerEmail", "customerAddress", "currency", "notes")

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")


@dataclass(frozen=True)
class Violation:
    """A validation problem in one row; ``row_index`` is zero-based."""

    row_index: int
    message: str

    def __str__(self) -> str:
        return f"Row {self.row_index + 1}: {self.message}"


@dataclass
class RowOk:
    index: int
    invoice: dict


@dataclass
class RowErr:
    index: int
    violations: list[Violation]


RowResult = Union[RowOk, RowErr]


@dataclass
class BatchValidation:
    results: list[RowResult] = field(default_factory=list)

    @property
    def violations(self) -> list[Violation]:
        return [v for r in self.results if isinstance(r, RowErr) for v in r.violations]

    @property
    def valid_rows(self) -> list[RowOk]:
        return [r for r in self.results if isinstance(r, RowOk)]

    @property
    def ok(self) -> bool:
        return not any(isinstance(r, RowErr) for r in self.results)


def _number(value: Any) -> Optional[float]:
    """Interpret a JSON value as a finite number; None when it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
    elif not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    # NaN and infinities pass every range comparison
    return number if math.isfinite(number) else None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_date(value: str) -> Optional[date]:
    """Parse a strict ``YYYY-MM-DD`` date; None if malformed or not a real day."""
    if not DATE_PATTERN.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _check_date(value: str, label: str, problems: list[str]) -> Optional[date]:
    if not value:
        return None
    if not DATE_PATTERN.match(value):
        problems.append(f"Invalid {label} format (use YYYY-MM-DD)")
        return None
    parsed = parse_date(value)
    if parsed is None:
        problems.append(f"Invalid {label} {value!r} (not a calendar date)")
    return parsed


def _check_item(position: int, raw: Any, problems: list[str]) -> Optional[dict]:
    label = f"Item {position}"
    if not isinstance(raw, dict):
        problems.append(f"{label}: must be an object")
        return None

    missing = [k for k in ("description", "quantity", "unitPrice") if _is_blank(raw.get(k))]
    if missing:
        problems.append(f"{label}: Missing required fields ({', '.join(missing)})")

    item_problems = len(problems)
    quantity = _number(raw.get("quantity"))
    if "quantity" not in missing and (quantity is None or not quantity.is_integer() or quantity < 1):
        problems.append(f"{label}: quantity must be a whole number of at least 1")

    unit_price = _number(raw.get("unitPrice"))
    if "unitPrice" not in missing and (unit_price is None or unit_price < 0):
        problems.append(f"{label}: unitPrice must be a number of at least 0")

    tax_rate = 0.0
    if not _is_blank(raw.get("taxRate")):
        tax_rate = _number(raw.get("taxRate"))
        if tax_rate is None or not 0 <= tax_rate <= 100:
            problems.append(f"{label}: taxRate must be a percentage between 0 and 100")

    if missing or len(problems) > item_problems:
        return None
    return {
        "name": str(raw.get("name") or ""),
        "description": str(raw["description"]).strip(),
        "quantity": int(quantity),
        "unit_price": unit_price,
        "tax_rate": tax_rate,
    }


def _check_items(value: str, problems: list[str]) -> Optional[list[dict]]:
    if not value:
        return None
    try:
        raw_items = json.loads(value)
    except json.JSONDecodeError:
        problems.append("Invalid items JSON format")
        return None
    if not isinstance(raw_items, list):
        problems.append("Items must be a valid JSON array")
        return None
    if not raw_items:
        problems.append("Items must contain at least one item")
        return None

    items = [_check_item(pos, raw, problems) for pos, raw in enumerate(raw_items, start=1)]
    if any(item is None for item in items):
        return None
    return items


def validate_row(row: RawRow) -> RowResult:
    """Check one raw row and return its typed payload or all of its violations."""
    problems: list[str] = []

    for column in REQUIRED_COLUMNS:
        if not row.get(column):
            problems.append(f'Missing required field "{column}"')

    items = _check_items(row.get("items"), problems)
    issue_date = _check_date(row.get("issueDate"), "issue date", problems)
    due_date = _check_date(row.get("dueDate"), "due date", problems)

    currency = row.get("currency").upper()
    if currency and not CURRENCY_PATTERN.match(currency):
        problems.append(f"Invalid currency {row.get('currency')!r} (use a 3-letter code)")

    email = row.get("customerEmail")
    if email and not re.match(EMAIL_PATTERN, email):
        problems.append(f"Invalid customer email {email!r}")

    if problems:
        return RowErr(row.index, [Violation(row.index, p) for p in problems])

    invoice = {
        "invoice_number": row.get("invoiceNumber"),
        "customer_name": row.get("customerName"),
        "customer_email": email,
        "customer_address": row.get("customerAddress"),
        "invoice_date": issue_date,
        "due_date": due_date,
        "notes": row.get("notes"),
        "status": InvoiceStatus.DRAFT,
        "items": items,
    }
    if currency:
        invoice["currency"] = currency
    return RowOk(row.index, invoice)


def validate_rows(rows: Iterable[RawRow]) -> BatchValidation:
    """Validate every row of a batch; never stops at the first bad row."""
    return BatchValidation([validate_row(row) for row in rows])
