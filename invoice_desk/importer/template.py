"""Example input for bulk invoice import."""
from __future__ import annotations
import csv
import io
import json
from pathlib import Path
from typing import Union

from .validation import REQUIRED_COLUMNS

TEMPLATE_COLUMNS = list(REQUIRED_COLUMNS)


def template_rows() -> list[dict[str, str]]:
    """Return the example row, with the items column JSON-encoded."""
    return [
        {
            "customerName": "John Doe",
            "invoiceNumber": "INV-001",
            "issueDate": "2024-03-15",
            "dueDate": "2024-04-15",
            "items": json.dumps(
                [
                    {
                        "description": "Web Development",
                        "quantity": 1,
                        "unitPrice": 1500.00,
                        "taxRate": 10,
                    }
                ]
            ),
        }
    ]


def render_template_csv() -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=TEMPLATE_COLUMNS, lineterminator="\n")
    writer.writeheader()
    writer.writerows(template_rows())
    return buffer.getvalue()


def write_template(path: Union[str, Path]) -> Path:
    """Write the import template as CSV and return its path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_template_csv(), encoding="utf-8")
    return path
