"""
Readers that turn bulk import files into raw rows.

Rows keep every value as a string; typing and validation happen later.
CSV text and ``.xlsx`` workbooks (first worksheet, header in the first row)
are supported.
"""
from __future__ import annotations
import csv
import io
import zipfile
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable, Union
from loguru import logger
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ..errors import ImportParseError


@dataclass
class RawRow:
    """One data row of an import file; ``index`` is zero-based."""

    index: int
    fields: dict[str, str] = field(default_factory=dict)

    def get(self, name: str) -> str:
        return self.fields.get(name, "")


def _cell_to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat() if value.time() == datetime.min.time() else value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _build_rows(header: list[str], records: Iterable[list[str]]) -> list[RawRow]:
    header = [h.strip() for h in header]
    if not any(header):
        raise ImportParseError("The file has no header row")

    rows: list[RawRow] = []
    for line_no, values in enumerate(records, start=2):
        if not any(v.strip() for v in values):
            continue  # blank line
        if len(values) > len(header):
            raise ImportParseError(
                f"Line {line_no} has {len(values)} columns but the header has {len(header)}"
            )
        padded = list(values) + [""] * (len(header) - len(values))
        fields = {name: value.strip() for name, value in zip(header, padded) if name}
        rows.append(RawRow(index=len(rows), fields=fields))

    if not rows:
        raise ImportParseError("The file contains no rows")
    return rows


def read_csv_text(text: str) -> list[RawRow]:
    """
    Parse CSV text with a header row into raw rows.

    Raises:
        ImportParseError: If the text is not readable CSV or has no data rows
    """
    text = text.lstrip("\ufeff")
    if not text.strip():
        raise ImportParseError("The file is empty")

    try:
        records = list(csv.reader(io.StringIO(text), strict=True))
    except csv.Error as e:
        raise ImportParseError(f"Error parsing CSV file: {e}") from e

    rows = _build_rows(records[0], records[1:])
    logger.debug(f"Read {len(rows)} rows from CSV input")
    return rows


def read_xlsx(path: Union[str, Path]) -> list[RawRow]:
    """
    Read the first worksheet of an Excel workbook into raw rows.

    Raises:
        ImportParseError: If the workbook cannot be opened or has no data rows
    """
    try:
        workbook = load_workbook(filename=str(path), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise ImportParseError(f"Error reading workbook {Path(path).name}: {e}") from e

    try:
        sheet = workbook.worksheets[0]
        records = [[_cell_to_str(v) for v in row] for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()

    if not records:
        raise ImportParseError("The workbook is empty")
    rows = _build_rows(records[0], records[1:])
    logger.debug(f"Read {len(rows)} rows from {Path(path).name}")
    return rows


def read_rows(path: Union[str, Path]) -> list[RawRow]:
    """Read an import file, choosing the reader by file extension."""
    path = Path(path)
    if path.suffix.lower() in (".xlsx", ".xlsm"):
        return read_xlsx(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise ImportParseError(f"{path.name} is not UTF-8 text: {e}") from e
    return read_csv_text(text)
