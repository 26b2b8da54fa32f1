"""
Import Client - Submit validated sheets to the import API.

This module is the HTTP side of the client: it serializes one sheet's
valid rows, posts them to the import endpoint and interprets the response.
It also reads back previously imported records for a sheet.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from services.row_validator import Row
from services.sheet_parser import SheetResult

logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'http://localhost:8000/api'
DEFAULT_TIMEOUT = 30
GENERIC_FAILURE = 'Failed to import data'


class ImportSubmissionError(Exception):
    """Raised when the import API rejects or fails a submission."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


@dataclass(frozen=True)
class ImportOutcome:
    """Counts reported by the server for one submission."""
    imported: int
    skipped: int


def serialize_row(row: Row) -> Dict[str, Any]:
    """JSON payload for one validated row."""
    return {
        'name': row.name,
        'amount': row.amount,
        'date': row.date.isoformat(),
        'verified': row.verified
    }


def _error_message(response, payload: Any) -> str:
    if isinstance(payload, dict) and payload.get('error'):
        return str(payload['error'])
    return f"{GENERIC_FAILURE} (HTTP {response.status_code})"


class ImportSubmitter:
    """
    HTTP client for the import and records endpoints.

    Any object with a requests-compatible ``get``/``post`` may be passed as
    ``session``.
    """

    def __init__(self, api_url: str = DEFAULT_API_URL, session=None,
                 timeout: float = DEFAULT_TIMEOUT):
        self.api_url = api_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def submit(self, sheet: SheetResult) -> ImportOutcome:
        """
        Post the sheet's valid rows to the import endpoint.

        Args:
            sheet: Sheet whose ``rows`` are submitted (errors are not sent)

        Returns:
            ImportOutcome with the server-reported counts

        Raises:
            ImportSubmissionError: On network failure, non-success status or
                malformed response payload
        """
        body = {
            'records': [serialize_row(row) for row in sheet.rows],
            'sheetName': sheet.label
        }
        url = f"{self.api_url}/import"

        logger.info(f"Submitting {len(sheet.rows)} rows from sheet '{sheet.label}' to {url}")

        try:
            response = self.session.post(url, json=body, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Import request failed: {e}")
            raise ImportSubmissionError(f"Network error: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code >= 400:
            message = _error_message(response, payload)
            logger.error(f"Import of sheet '{sheet.label}' failed: {message}")
            raise ImportSubmissionError(message, status_code=response.status_code)

        if not isinstance(payload, dict) or payload.get('success') is not True:
            message = _error_message(response, payload)
            logger.error(f"Unexpected import response for sheet '{sheet.label}': {payload!r}")
            raise ImportSubmissionError(message, status_code=response.status_code)

        imported = payload.get('imported')
        skipped = payload.get('skipped')
        if not isinstance(imported, int) or not isinstance(skipped, int):
            raise ImportSubmissionError(
                f"Malformed import response: {payload!r}",
                status_code=response.status_code
            )

        logger.info(f"Sheet '{sheet.label}': {imported} imported, {skipped} skipped")
        return ImportOutcome(imported=imported, skipped=skipped)

    def fetch_records(self, sheet_label: str, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        """Fetch one page of imported records for a sheet."""
        url = f"{self.api_url}/records/{quote(sheet_label, safe='')}"

        try:
            response = self.session.get(
                url, params={'page': page, 'limit': limit}, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Records request failed: {e}")
            raise ImportSubmissionError(f"Network error: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code >= 400 or not isinstance(payload, dict) or 'records' not in payload:
            if isinstance(payload, dict) and payload.get('error'):
                message = str(payload['error'])
            else:
                message = f"Failed to fetch records (HTTP {response.status_code})"
            raise ImportSubmissionError(message, status_code=response.status_code)

        return payload
