"""
Pytest configuration and fixtures for ledger import tests.
"""

import os

# Application modules read settings at import time
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ.setdefault('LOG_FILE', os.devnull)

from datetime import datetime
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.dependencies import get_clock, get_db
from api.main import app
from backend.models.schema import Base

# Fixed "now" shared by client-side validation and the server clock
REFERENCE = datetime(2026, 10, 19, 12, 0, 0)


@pytest.fixture
def reference():
    """Reference instant used for date-window checks."""
    return REFERENCE


@pytest.fixture(scope='function')
def engine():
    """Create an in-memory test database engine."""
    eng = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope='function')
def session(session_factory):
    """Create a new database session for a test."""
    sess = session_factory()
    yield sess
    sess.close()


@pytest.fixture
def client(session_factory, reference):
    """API client bound to the test database and the fixed server clock."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: (lambda: reference)

    yield TestClient(app)

    app.dependency_overrides.clear()


def build_workbook(sheets) -> bytes:
    """
    Build an .xlsx file in memory.

    Args:
        sheets: Mapping of sheet title to a list of rows (first row = headers)
    """
    workbook = Workbook()
    workbook.remove(workbook.active)

    for title, rows in sheets.items():
        worksheet = workbook.create_sheet(title)
        for row in rows:
            worksheet.append(row)

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_workbook():
    """Factory fixture returning workbook bytes for a sheets mapping."""
    return build_workbook
