"""
FastAPI application for the ledger import system.

This package contains the REST API that persists imported spreadsheet
rows and serves them back by sheet.
"""

__version__ = "1.0.0"
