"""
Import Session - In-memory working set for reviewing and importing sheets.

The session owns the parsed sheets, the currently selected sheet, the
pending row deletion and the busy flag for an outstanding import. It is
framework-agnostic so the CLI, or any other front end, can drive it.
"""

import logging
import math
from datetime import datetime
from typing import Dict, List, Optional

from services.import_client import ImportOutcome, ImportSubmitter
from services.row_validator import Row, ValidationIssue
from services.sheet_parser import SheetResult, all_errors, parse_workbook

logger = logging.getLogger(__name__)

PAGE_SIZE = 10


class ImportInProgressError(RuntimeError):
    """Raised when an import is requested while another is outstanding."""


class ImportSession:
    """Working set of parsed sheets awaiting review and import."""

    def __init__(self, page_size: int = PAGE_SIZE):
        self.page_size = page_size
        self.sheets: List[SheetResult] = []
        self.selected_label: Optional[str] = None
        self.importing = False
        self._pending_delete: Optional[int] = None

    def load(self, file_bytes: bytes, reference: Optional[datetime] = None) -> List[ValidationIssue]:
        """
        Parse an upload and replace the working set with its sheets.

        Returns:
            All validation issues across sheets
        """
        sheets = parse_workbook(file_bytes, reference=reference)
        self.set_sheets(sheets)
        return all_errors(sheets)

    def set_sheets(self, sheets: List[SheetResult]):
        self.sheets = list(sheets)
        self.selected_label = self.sheets[0].label if self.sheets else None
        self._pending_delete = None

    @property
    def current_sheet(self) -> Optional[SheetResult]:
        for sheet in self.sheets:
            if sheet.label == self.selected_label:
                return sheet
        return None

    def select(self, label: str):
        """Select a sheet by label."""
        if not any(sheet.label == label for sheet in self.sheets):
            raise KeyError(f"Unknown sheet: {label}")
        self.selected_label = label
        self._pending_delete = None

    # Pagination

    def page_count(self) -> int:
        sheet = self.current_sheet
        if sheet is None or not sheet.rows:
            return 0
        return math.ceil(len(sheet.rows) / self.page_size)

    def _clamp_page(self, number: int) -> int:
        return min(max(number, 1), max(self.page_count(), 1))

    def page(self, number: int = 1) -> List[Row]:
        """Rows shown on a page of the selected sheet (display slice only)."""
        sheet = self.current_sheet
        if sheet is None:
            return []
        number = self._clamp_page(number)
        start = (number - 1) * self.page_size
        return sheet.rows[start:start + self.page_size]

    # Deletion

    @property
    def pending_delete(self) -> Optional[int]:
        return self._pending_delete

    def request_delete(self, page_number: int, position: int):
        """
        Ask to delete the row displayed at ``position`` (0-based) on a page.

        The absolute row index is derived from the slice currently shown, so
        the deletion targets exactly the row the user picked.
        """
        displayed = self.page(page_number)
        if not 0 <= position < len(displayed):
            raise IndexError(f"No row at position {position} on page {page_number}")
        self._pending_delete = (self._clamp_page(page_number) - 1) * self.page_size + position

    def cancel_delete(self):
        self._pending_delete = None

    def confirm_delete(self) -> Optional[Row]:
        """Remove the pending row from the selected sheet (no undo)."""
        if self._pending_delete is None:
            return None
        sheet = self.current_sheet
        index = self._pending_delete
        self._pending_delete = None
        if sheet is None or index >= len(sheet.rows):
            return None
        removed = sheet.rows.pop(index)
        logger.debug(f"Deleted row {index} from sheet '{sheet.label}'")
        return removed

    # Import

    def import_selected(self, submitter: ImportSubmitter) -> ImportOutcome:
        """
        Submit the selected sheet.

        On success the sheet leaves the working set and the selection moves
        to the first remaining sheet. Submission errors propagate and leave
        the working set untouched.

        Raises:
            ImportInProgressError: If an import is already outstanding
            ImportSubmissionError: If the server rejects the submission
        """
        if self.importing:
            raise ImportInProgressError('An import is already in progress')

        sheet = self.current_sheet
        if sheet is None:
            raise LookupError('No sheet selected')

        self.importing = True
        try:
            outcome = submitter.submit(sheet)
        finally:
            self.importing = False

        self.sheets = [s for s in self.sheets if s.label != sheet.label]
        self.selected_label = self.sheets[0].label if self.sheets else None
        self._pending_delete = None
        return outcome

    def error_report(self) -> Dict[str, List[str]]:
        """Validation issues grouped by sheet as ``Row N: message`` lines."""
        report = {}
        for sheet in self.sheets:
            if sheet.errors:
                report[sheet.label] = [
                    f"Row {error.row_number}: {error.message}" for error in sheet.errors
                ]
        return report
