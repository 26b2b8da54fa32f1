"""Models package for the ledger import system."""
from backend.models.schema import Base, Record

__all__ = ['Base', 'Record']
