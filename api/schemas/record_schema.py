"""
Record-related Pydantic schemas.

This module contains schemas for reading back imported records.
"""

import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class RecordResponse(BaseModel):
    """A persisted record."""

    id: int = Field(..., description="Record ID")
    name: str = Field(..., description="Row name")
    amount: float = Field(..., description="Row amount")
    date: datetime.date = Field(..., description="Row date")
    verified: bool = Field(..., description="Whether the row was marked verified")
    sheet_name: str = Field(..., serialization_alias="sheetName", description="Source sheet label")
    imported_at: Optional[datetime.datetime] = Field(
        None, serialization_alias="importedAt", description="Server import timestamp"
    )

    class Config:
        from_attributes = True


class RecordListResponse(BaseModel):
    """Paginated records of one sheet."""

    records: List[RecordResponse] = Field(..., description="Records on the requested page")
    total: int = Field(..., description="Total records for the sheet")
    pages: int = Field(..., description="Total number of pages")

    class Config:
        json_schema_extra = {
            "example": {
                "records": [
                    {
                        "id": 1,
                        "name": "Office rent",
                        "amount": 25000.0,
                        "date": "2025-10-01",
                        "verified": True,
                        "sheetName": "October",
                        "importedAt": "2025-10-15T12:00:00"
                    }
                ],
                "total": 25,
                "pages": 3
            }
        }
