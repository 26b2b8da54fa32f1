"""
Import-related Pydantic schemas.

This module contains schemas for record import requests and responses.
"""

from typing import Any, List
from pydantic import BaseModel, Field


class ImportRecordIn(BaseModel):
    """One row submitted for import."""

    name: str = Field(..., description="Row name")
    amount: float = Field(..., description="Row amount")
    date: Any = Field(..., description="Row date as sent by the client; unreadable dates are skipped")
    verified: bool = Field(False, description="Whether the row was marked verified")


class ImportRequest(BaseModel):
    """Request body for a sheet import."""

    records: List[ImportRecordIn] = Field(..., description="Validated rows of one sheet")
    sheet_name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        alias="sheetName",
        description="Label of the sheet the rows came from"
    )

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "records": [
                    {"name": "Office rent", "amount": 25000.0, "date": "2025-10-01", "verified": True}
                ],
                "sheetName": "October"
            }
        }


class ImportResponse(BaseModel):
    """Result of a successful import."""

    success: bool = Field(True, description="Operation success flag")
    imported: int = Field(..., description="Records inserted")
    skipped: int = Field(..., description="Records dropped by the month-window check")

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "imported": 1000,
                "skipped": 500
            }
        }
