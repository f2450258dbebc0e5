"""
Database Utilities Module

Submodules:
- db_transaction: commit/rollback wrapper that maps database errors to HTTP 500
"""

from .db_transaction import db_transaction

__all__ = [
    "db_transaction",
]
