"""
SQLAlchemy models for the ledger import system.

This module defines the database schema using SQLAlchemy ORM,
matching the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    Boolean, Column, Date, Float, Integer, String, TIMESTAMP,
    CheckConstraint, Index, text
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Record(Base):
    """Represents one imported spreadsheet row."""

    __tablename__ = 'records'
    __table_args__ = (
        CheckConstraint('amount >= 0', name='records_amount_check'),
        Index('idx_records_sheet_date', 'sheet_name', 'date'),
        {'comment': 'Rows imported from uploaded spreadsheets'}
    )

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        nullable=False
    )
    name = Column(
        String(255),
        nullable=False,
        comment='Row name'
    )
    amount = Column(
        Float,
        nullable=False,
        comment='Row amount (non-negative)'
    )
    date = Column(
        Date,
        nullable=False,
        comment='Row date, within the import month'
    )
    verified = Column(
        Boolean,
        default=False,
        server_default=text('false'),
        nullable=False,
        comment='True if the row was marked verified'
    )
    sheet_name = Column(
        String(255),
        nullable=False,
        comment='Worksheet the row was imported from'
    )
    imported_at = Column(
        TIMESTAMP,
        server_default=text('CURRENT_TIMESTAMP'),
        nullable=False,
        comment='Server-assigned import timestamp'
    )

    def __repr__(self):
        return f"<Record(id={self.id}, sheet='{self.sheet_name}', name='{self.name}')>"
