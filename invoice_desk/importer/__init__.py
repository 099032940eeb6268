"""
Bulk invoice import.

Reads tabular invoice files, validates every row, and stores the batch only
when it is valid as a whole.
"""
from .pipeline import BulkImporter, ImportResult, ImportState, RowFailure
from .reader import RawRow, read_csv_text, read_rows, read_xlsx
from .template import TEMPLATE_COLUMNS, render_template_csv, template_rows, write_template
from .validation import (
    OPTIONAL_COLUMNS,
    REQUIRED_COLUMNS,
    BatchValidation,
    RowErr,
    RowOk,
    Violation,
    validate_row,
    validate_rows,
)

__all__ = [
    "BulkImporter",
    "ImportResult",
    "ImportState",
    "RowFailure",
    "RawRow",
    "read_csv_text",
    "read_rows",
    "read_xlsx",
    "TEMPLATE_COLUMNS",
    "render_template_csv",
    "template_rows",
    "write_template",
    "OPTIONAL_COLUMNS",
    "REQUIRED_COLUMNS",
    "BatchValidation",
    "RowErr",
    "RowOk",
    "Violation",
    "validate_row",
    "validate_rows",
]
