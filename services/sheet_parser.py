"""
Sheet Parser - Decode an uploaded workbook into validated sheet results.

Every worksheet becomes one SheetResult holding the rows that passed
validation and the issues found in the rows that did not.
"""

import logging
import zipfile
from dataclasses import dataclass, field
from datetime import datetime
from io import BytesIO
from typing import Any, Dict, Iterable, List, Optional, Sequence

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from services.row_validator import Row, ValidationIssue, row_number, validate_row

logger = logging.getLogger(__name__)

# Upload ceiling (2 MiB)
MAX_FILE_SIZE_BYTES = 2 * 1024 * 1024


class FileTooLargeError(ValueError):
    """Raised when an upload exceeds the size ceiling."""

    def __init__(self, size: int, limit: int = MAX_FILE_SIZE_BYTES):
        self.size = size
        self.limit = limit
        super().__init__(
            f"File size ({size} bytes) exceeds the {limit // (1024 * 1024)}MB limit"
        )


class WorkbookFormatError(ValueError):
    """Raised when the upload is not a readable .xlsx workbook."""


@dataclass
class SheetResult:
    """Validated content of one worksheet."""
    label: str
    rows: List[Row] = field(default_factory=list)
    errors: List[ValidationIssue] = field(default_factory=list)


def ensure_within_size_limit(size: int, limit: int = MAX_FILE_SIZE_BYTES) -> None:
    """Raise FileTooLargeError when ``size`` is above ``limit``."""
    if size > limit:
        raise FileTooLargeError(size, limit)


def _normalize_headers(header_row: Sequence[Any]) -> List[Optional[str]]:
    headers = []
    for value in header_row:
        if value is None or not str(value).strip():
            headers.append(None)
        else:
            headers.append(str(value).strip().lower())
    return headers


def _is_empty_row(values: Sequence[Any]) -> bool:
    for value in values:
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return False
    return True


def sheet_records(rows: Iterable[Sequence[Any]]) -> List[Dict[str, Any]]:
    """
    Turn worksheet rows into header-keyed records.

    The first row supplies the field names. Completely empty rows are
    skipped and ``None`` cells are left out of the record.
    """
    iterator = iter(rows)
    try:
        header_row = next(iterator)
    except StopIteration:
        return []

    headers = _normalize_headers(header_row)
    records = []
    for values in iterator:
        if _is_empty_row(values):
            continue
        record = {}
        for header, value in zip(headers, values):
            if header is None or value is None:
                continue
            record[header] = value
        records.append(record)
    return records


def parse_sheet(label: str, records: List[Dict[str, Any]], reference: datetime) -> SheetResult:
    """Validate the records of one worksheet."""
    result = SheetResult(label=label)

    for index, record in enumerate(records):
        validation = validate_row(record, reference)
        if validation.is_valid:
            result.rows.append(validation.row)
            continue
        for message in validation.messages:
            result.errors.append(
                ValidationIssue(sheet_label=label, row_number=row_number(index), message=message)
            )

    logger.info(f"Sheet '{label}': {len(result.rows)} valid rows, "
                f"{len(result.errors)} validation errors")
    return result


def parse_workbook(file_bytes: bytes, reference: Optional[datetime] = None) -> List[SheetResult]:
    """
    Parse an .xlsx upload into one SheetResult per worksheet.

    Args:
        file_bytes: Raw content of the uploaded file
        reference: Instant bounding the accepted dates (default: now)

    Returns:
        SheetResults in workbook order, including sheets without valid rows

    Raises:
        FileTooLargeError: If the upload is above the size ceiling
        WorkbookFormatError: If the bytes are not a readable workbook
    """
    ensure_within_size_limit(len(file_bytes))

    if reference is None:
        reference = datetime.now()

    try:
        workbook = load_workbook(BytesIO(file_bytes), read_only=True, data_only=True)
    except (zipfile.BadZipFile, InvalidFileException, KeyError, OSError) as e:
        logger.error(f"Could not read workbook: {e}")
        raise WorkbookFormatError(f"Not a valid .xlsx workbook: {e}") from e

    try:
        results = []
        for worksheet in workbook.worksheets:
            records = sheet_records(worksheet.iter_rows(values_only=True))
            results.append(parse_sheet(worksheet.title, records, reference))
    finally:
        workbook.close()

    logger.info(f"Parsed {len(results)} sheets")
    return results


def all_errors(sheets: Iterable[SheetResult]) -> List[ValidationIssue]:
    """Flatten validation issues across sheets, preserving order."""
    errors = []
    for sheet in sheets:
        errors.extend(sheet.errors)
    return errors
