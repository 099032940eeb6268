"""
Bulk invoice import.

A batch moves through parse -> validate -> gate -> persist:

- any validation problem anywhere rejects the whole batch and nothing is
  stored;
- once the batch is valid, each row is stored on its own, and a row that
  fails to store does not stop the rows after it.

The result lists the stored invoices and the per-row failures side by side.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Union
from loguru import logger

from ..errors import ImportParseError
from ..models import Invoice
from ..services import InvoiceService
from .reader import RawRow, read_csv_text, read_rows
from .validation import BatchValidation, Violation, validate_rows


class ImportState(str, Enum):
    PARSED = "parsed"
    VALIDATED = "validated"
    REJECTED = "rejected"
    PARTIALLY_PERSISTED = "partially_persisted"
    FULLY_PERSISTED = "fully_persisted"


@dataclass
class RowFailure:
    """A valid row that could not be stored; ``index`` is zero-based."""

    index: int
    error: str
    exception: Optional[Exception] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        return f"Row {self.index + 1}: {self.error}"


@dataclass
class ImportResult:
    state: ImportState
    total_rows: int = 0
    success: list[Invoice] = field(default_factory=list)
    errors: list[RowFailure] = field(default_factory=list)
    violations: list[Violation] = field(default_factory=list)

    @property
    def rejected(self) -> bool:
        return self.state is ImportState.REJECTED

    def summary(self) -> str:
        if self.rejected:
            return f"Rejected {self.total_rows} rows with {len(self.violations)} problems"
        if self.state is ImportState.VALIDATED:
            return f"Validated {self.total_rows} rows (nothing stored)"
        return (
            f"Upload complete. {len(self.success)} invoices created successfully. "
            f"{len(self.errors)} failed."
        )


class BulkImporter:
    """
    Runs bulk invoice imports against an ``InvoiceService``.

    Usage:
        importer = BulkImporter(InvoiceService(store))
        result = importer.import_file("invoices.csv")
        if result.rejected:
            for violation in result.violations:
                print(violation)
    """

    def __init__(self, invoices: InvoiceService):
        self.invoices = invoices

    def validate(self, rows: Iterable[RawRow]) -> BatchValidation:
        return validate_rows(rows)

    def run(self, rows: list[RawRow], dry_run: bool = False) -> ImportResult:
        """
        Validate and store a parsed batch.

        Args:
            rows: Parsed rows of the batch
            dry_run: Stop after validation without storing anything

        Returns:
            ImportResult describing the outcome

        Raises:
            ImportParseError: If the batch has no rows
        """
        if not rows:
            raise ImportParseError("The batch contains no rows")
        logger.info(f"Importing batch of {len(rows)} rows")
        validation = self.validate(rows)

        if not validation.ok:
            violations = validation.violations
            logger.warning(f"Rejected batch of {len(rows)} rows: {len(violations)} problems")
            for violation in violations:
                logger.warning(f"  {violation}")
            return ImportResult(
                state=ImportState.REJECTED,
                total_rows=len(rows),
                violations=violations,
            )

        if dry_run:
            return ImportResult(state=ImportState.VALIDATED, total_rows=len(rows))

        result = ImportResult(state=ImportState.FULLY_PERSISTED, total_rows=len(rows))
        for row in validation.valid_rows:
            try:
                invoice = self.invoices.create(row.invoice)
            except Exception as e:
                logger.error(f"Row {row.index + 1}: failed to store invoice: {e}")
                result.errors.append(RowFailure(index=row.index, error=str(e), exception=e))
                continue
            result.success.append(invoice)

        if result.errors:
            result.state = ImportState.PARTIALLY_PERSISTED
        logger.info(result.summary())
        return result

    def import_text(self, text: str, dry_run: bool = False) -> ImportResult:
        """Parse CSV text and import it. Raises ImportParseError if unreadable."""
        return self.run(read_csv_text(text), dry_run=dry_run)

    def import_file(self, path: Union[str, Path], dry_run: bool = False) -> ImportResult:
        """Read a CSV or Excel file and import it. Raises ImportParseError if unreadable."""
        logger.info(f"Reading import file {path}")
        return self.run(read_rows(path), dry_run=dry_run)
