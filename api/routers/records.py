"""
Records router - Import sheet rows and read them back.

This module provides the endpoint that persists one sheet's validated rows
and the paginated retrieval of imported rows by sheet.
"""

import logging
from datetime import datetime
from typing import Callable

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from api.config import settings
from api.dependencies import get_clock, get_db
from api.schemas.common import FailureResponse
from api.schemas.import_schema import ImportRequest, ImportResponse
from api.schemas.record_schema import RecordListResponse, RecordResponse
from services.record_import_service import RecordImportService, StorageError

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(tags=['records'])


def _storage_failure(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=FailureResponse(error=message).model_dump()
    )


@router.post(
    '/import',
    response_model=ImportResponse,
    responses={500: {'model': FailureResponse}}
)
def import_records(
    request: ImportRequest,
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock)
):
    """
    Import the validated rows of one sheet.

    Rows whose date is outside the current month, as measured by the
    server at processing time, are skipped. Survivors are tagged with the
    sheet name and inserted in chunks of `IMPORT_BATCH_SIZE`.

    **Example:**
    ```bash
    curl -X POST http://localhost:8000/api/import \\
         -H 'Content-Type: application/json' \\
         -d '{"records": [{"name": "Rent", "amount": 100, "date": "2025-10-01"}], "sheetName": "October"}'
    ```

    **Returns:**
    - `{"success": true, "imported": n, "skipped": m}`
    - 500 `{"error": "Failed to import records"}` if any chunk insert fails;
      chunks committed before the failure are not rolled back unless
      `IMPORT_ATOMIC` is enabled
    """
    logger.info(f"Import request: {len(request.records)} records for sheet '{request.sheet_name}'")

    service = RecordImportService(
        db,
        batch_size=settings.IMPORT_BATCH_SIZE,
        atomic=settings.IMPORT_ATOMIC
    )

    try:
        result = service.import_records(
            [record.model_dump() for record in request.records],
            request.sheet_name,
            reference=clock()
        )
    except StorageError:
        return _storage_failure("Failed to import records")

    return ImportResponse(imported=result['imported'], skipped=result['skipped'])


@router.get(
    '/records/{sheet_name}',
    response_model=RecordListResponse,
    responses={500: {'model': FailureResponse}}
)
def get_records(
    sheet_name: str,
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, description="Records per page"),
    db: Session = Depends(get_db)
):
    """
    List imported records of a sheet, newest date first.

    **Example:**
    ```bash
    curl "http://localhost:8000/api/records/October?page=2&limit=10"
    ```

    **Returns:**
    `{"records": [...], "total": n, "pages": ceil(n / limit)}`
    """
    service = RecordImportService(db)

    try:
        records, total, pages = service.fetch_records(sheet_name, page=page, limit=limit)
    except StorageError:
        return _storage_failure("Failed to fetch records")

    return RecordListResponse(
        records=[RecordResponse.model_validate(record) for record in records],
        total=total,
        pages=pages
    )
