"""
Database package for the billboard operations system.

This package provides modular database operations:
- connection: Database connection management (get_db, close_db, init_db, transaction)
- schema: Table creation and indexes
- seed: Demo seed data
"""

from database.connection import get_db, close_db, init_db, transaction
from database.schema import drop_tables, create_tables, create_indexes
from database.seed import seed_database

__all__ = [
    # Connection
    'get_db',
    'close_db',
    'init_db',
    'transaction',
    # Schema
    'drop_tables',
    'create_tables',
    'create_indexes',
    # Seed
    'seed_database',
]
