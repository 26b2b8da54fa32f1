"""
Record Import Service - Persist and query imported spreadsheet rows.

This module contains the server-side import workflow: the month-window
re-check against the server's own clock, chunked bulk inserts and the
paginated retrieval used by the records endpoint.
"""

import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.models.schema import Record
from services.row_validator import is_within_month, parse_date

logger = logging.getLogger(__name__)

# Default configuration (can be overridden)
DEFAULT_BATCH_SIZE = 1000


class StorageError(Exception):
    """Raised when the database rejects an insert or query."""


def filter_current_month(records: Sequence[Mapping[str, Any]],
                         reference: datetime) -> List[Dict[str, Any]]:
    """
    Keep only records whose date falls in the reference month.

    Dates arrive as sent by the client and are coerced with ``parse_date``;
    records whose date cannot be read are dropped like out-of-month ones.
    Survivors are returned as copies carrying the coerced date.
    """
    survivors = []
    for record in records:
        row_date = parse_date(record.get('date'))
        if row_date is None or not is_within_month(row_date, reference):
            continue
        survivors.append({**record, 'date': row_date})
    return survivors


def chunked(items: Sequence[Any], size: int) -> List[Sequence[Any]]:
    """Split ``items`` into consecutive slices of at most ``size``."""
    return [items[i:i + size] for i in range(0, len(items), size)]


class RecordImportService:
    """
    Framework-agnostic service for importing and reading records.

    Chunks are committed one by one unless ``atomic`` is set, in which case
    the whole import is a single transaction.
    """

    def __init__(
        self,
        db_session: Session,
        batch_size: int = DEFAULT_BATCH_SIZE,
        atomic: bool = False
    ):
        """
        Initialize record import service.

        Args:
            db_session: SQLAlchemy database session
            batch_size: Maximum records per bulk insert (default: 1000)
            atomic: Roll back every chunk if any chunk fails
        """
        self.session = db_session
        self.batch_size = max(1, batch_size)
        self.atomic = atomic

    def import_records(self, records: Sequence[Mapping[str, Any]], sheet_name: str,
                       reference: datetime) -> Dict[str, int]:
        """
        Import records for a sheet.

        Args:
            records: Row mappings with name, amount, date and verified
            sheet_name: Label of the sheet the rows came from
            reference: Server processing instant bounding accepted dates

        Returns:
            {'imported': int, 'skipped': int}

        Raises:
            StorageError: If any chunk insert fails. In non-atomic mode the
                chunks committed before the failure stay persisted.
        """
        survivors = filter_current_month(records, reference)
        skipped = len(records) - len(survivors)

        logger.info(f"Importing sheet '{sheet_name}': {len(survivors)} in window, "
                    f"{skipped} skipped (outside {reference:%Y-%m} or unreadable date)")

        chunks = chunked(survivors, self.batch_size)
        try:
            for chunk_idx, chunk in enumerate(chunks, 1):
                self._insert_chunk(chunk, sheet_name)
                if self.atomic:
                    self.session.flush()
                else:
                    self.session.commit()
                logger.debug(f"Inserted chunk {chunk_idx}/{len(chunks)} ({len(chunk)} records)")

            if self.atomic:
                self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Import of sheet '{sheet_name}' failed: {e}", exc_info=True)
            raise StorageError(str(e)) from e

        return {'imported': len(survivors), 'skipped': skipped}

    def _insert_chunk(self, chunk: Sequence[Mapping[str, Any]], sheet_name: str):
        record_objects = [
            Record(
                name=record['name'],
                amount=record['amount'],
                date=record['date'],
                verified=bool(record.get('verified', False)),
                sheet_name=sheet_name
            )
            for record in chunk
        ]
        self.session.bulk_save_objects(record_objects)

    def fetch_records(self, sheet_name: str, page: int = 1,
                      limit: int = 10) -> Tuple[List[Record], int, int]:
        """
        Fetch one page of a sheet's records, newest date first.

        Returns:
            (records, total, pages)

        Raises:
            StorageError: If the query fails
        """
        try:
            query = self.session.query(Record).filter(Record.sheet_name == sheet_name)
            total = query.count()
            records = query.order_by(Record.date.desc(), Record.id.desc())\
                .offset((page - 1) * limit)\
                .limit(limit)\
                .all()
        except SQLAlchemyError as e:
            logger.error(f"Fetching records for sheet '{sheet_name}' failed: {e}", exc_info=True)
            raise StorageError(str(e)) from e

        pages = math.ceil(total / limit) if limit else 0
        return records, total, pages
