"""
Database connection management.
Handles per-request connections, initialization, transactions and teardown.
"""

import os
import sqlite3
from contextlib import contextmanager

from flask import g, current_app


def get_db():
    """
    Get request-scoped database connection with row factory.

    Returns:
        sqlite3.Connection: Database connection object
    """
    if 'db' not in g:
        db_path = current_app.config.get('DATABASE_PATH', 'instance/billboard_ops.db')
        db_dir = os.path.dirname(db_path)
        if db_dir and db_path != ':memory:':
            os.makedirs(db_dir, exist_ok=True)
        g.db = sqlite3.connect(db_path)
        g.db.row_factory = sqlite3.Row
        # Enable foreign key constraints
        g.db.execute('PRAGMA foreign_keys = ON')
        # Enable WAL mode for better concurrency
        g.db.execute('PRAGMA journal_mode = WAL')
    return g.db


def close_db(e=None):
    """
    Close database connection.

    Args:
        e: Exception if any (from Flask teardown context)
    """
    db = g.pop('db', None)
    if db is not None:
        db.close()


@contextmanager
def transaction():
    """
    Run a block inside one write transaction.

    Opens BEGIN IMMEDIATE so the write lock is taken before any availability
    read; concurrent writers queue behind it. When a transaction is already
    open the block joins it and the outermost caller commits.

    Yields:
        sqlite3.Cursor: Cursor bound to the transaction
    """
    db = get_db()
    cursor = db.cursor()

    if db.in_transaction:
        yield cursor
        return

    cursor.execute('BEGIN IMMEDIATE')
    try:
        yield cursor
        db.commit()
    except Exception:
        db.rollback()
        raise


def init_db():
    """
    Initialize database: drop existing tables and create the schema.
    WARNING: This will delete all existing data!
    """
    from database.schema import drop_tables, create_tables, create_indexes

    db = get_db()

    # Drop existing tables (in reverse order of dependencies)
    drop_tables(db)

    # Create all tables
    create_tables(db)

    # Create indexes
    create_indexes(db)

    db.commit()
    current_app.logger.info('Database initialized at %s',
                            current_app.config.get('DATABASE_PATH'))
