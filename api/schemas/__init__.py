"""Request and response bodies of the ledger import API."""

from api.schemas.common import ErrorResponse, FailureResponse, HealthCheckResponse
from api.schemas.import_schema import ImportRecordIn, ImportRequest, ImportResponse
from api.schemas.record_schema import RecordResponse, RecordListResponse

__all__ = [
    # Common
    'ErrorResponse',
    'FailureResponse',
    'HealthCheckResponse',

    # Import
    'ImportRecordIn',
    'ImportRequest',
    'ImportResponse',

    # Record
    'RecordResponse',
    'RecordListResponse',
]
