"""
Database schema: users and links.

Tables are declared with SQLAlchemy Core so the same definitions create
valid DDL on MySQL (production) and SQLite (tests, local work). Queries
against them are plain parameterized SQL through the connection pool.

The ``sessions`` table is owned by Flask-Session and created by it.
"""

import logging

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    func,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from favlinks.database import categorize_error, describe_error

logger = logging.getLogger('favlinks.db')

metadata = MetaData()

users = Table(
    'users',
    metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('username', String(20), unique=True, nullable=False),
    # bcrypt output is 60 chars.
    Column('password', String(60), nullable=False),
)

links = Table(
    'links',
    metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('title', String(100), nullable=False),
    Column('url', String(2048), nullable=False),
    Column('description', String(500), nullable=False, default=''),
    Column('created_at', DateTime, nullable=False, server_default=func.current_timestamp()),
)


def init_db(engine: Engine) -> bool:
    """
    Create the application tables if they don't exist.

    Idempotent; safe on every startup. A database that is unreachable at
    boot is logged and reported as False instead of stopping the process.
    """
    try:
        metadata.create_all(engine, checkfirst=True)
    except SQLAlchemyError as exc:
        logger.error(
            'Schema initialization failed: %s', describe_error(exc),
            extra={'event': 'db_error', 'category': categorize_error(exc)},
        )
        return False
    return True
