"""
Connection pool wrapper: the single entry point for SQL in the app.

The pool itself is the SQLAlchemy engine created by Flask-SQLAlchemy
(``QueuePool`` for MySQL, bounded by ``pool_size`` + ``max_overflow``).
This module adds one operation on top of it, ``execute(query, params)``,
and turns driver failures into a categorized ``DatabaseError``.

All queries use named bound parameters (``:name``) to prevent SQL injection.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from flask import current_app
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger('favlinks.db')

# Diagnostic categories for storage failures.
CONNECTION_LOST = 'connection_lost'
TOO_MANY_CONNECTIONS = 'too_many_connections'
CONNECTION_REFUSED = 'connection_refused'
HOST_NOT_FOUND = 'host_not_found'
UNKNOWN = 'unknown'

# MySQL client/server error numbers.
_ERRNO_CATEGORIES = {
    2006: CONNECTION_LOST,       # CR_SERVER_GONE_ERROR
    2013: CONNECTION_LOST,       # CR_SERVER_LOST
    1040: TOO_MANY_CONNECTIONS,  # ER_CON_COUNT_ERROR
    2003: CONNECTION_REFUSED,    # CR_CONN_HOST_ERROR
    1045: CONNECTION_REFUSED,    # ER_ACCESS_DENIED_ERROR
    2005: HOST_NOT_FOUND,        # CR_UNKNOWN_HOST
}

_MESSAGE_CATEGORIES = (
    ('lost connection', CONNECTION_LOST),
    ('server has gone away', CONNECTION_LOST),
    ('too many connections', TOO_MANY_CONNECTIONS),
    ('connection refused', CONNECTION_REFUSED),
    ('access denied', CONNECTION_REFUSED),
    ('unknown mysql server host', HOST_NOT_FOUND),
    ('name or service not known', HOST_NOT_FOUND),
)

_DESCRIPTIONS = {
    CONNECTION_LOST: 'The database connection was closed',
    TOO_MANY_CONNECTIONS: 'Too many open database connections',
    CONNECTION_REFUSED: 'Database connection refused; check the credentials',
    HOST_NOT_FOUND: 'Database host not found; check the configuration',
}


class DatabaseError(Exception):
    """A query or connection failure, tagged with a diagnostic category."""

    def __init__(self, category: str, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.category = category
        self.code = code


class DuplicateKeyError(DatabaseError):
    """A UNIQUE constraint rejected the write."""


def _error_code(exc: BaseException) -> Optional[int]:
    orig = getattr(exc, 'orig', None)
    code = getattr(orig, 'errno', None)
    if code is None and orig is not None and getattr(orig, 'args', None):
        first = orig.args[0]
        if isinstance(first, int):
            code = first
    return code


def categorize_error(exc: BaseException) -> str:
    """Map a driver exception to one of the diagnostic categories."""
    code = _error_code(exc)
    if code in _ERRNO_CATEGORIES:
        return _ERRNO_CATEGORIES[code]

    message = str(exc).lower()
    for fragment, category in _MESSAGE_CATEGORIES:
        if fragment in message:
            return category
    return UNKNOWN


def describe_error(exc: BaseException) -> str:
    """Human-readable diagnostic for a driver exception."""
    return _DESCRIPTIONS.get(categorize_error(exc), str(exc).splitlines()[0])


def _is_duplicate_key(exc: SQLAlchemyError) -> bool:
    if _error_code(exc) == 1062:  # ER_DUP_ENTRY
        return True
    message = str(exc).lower()
    return 'unique constraint' in message or 'duplicate entry' in message


class ConnectionPool:
    """
    Shared pool of database connections.

    One instance is built by the app factory and stored in
    ``app.extensions['pool']``; route handlers reach it via ``get_pool()``.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def execute(self, query: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Run one parameterized statement on a pooled connection and commit.

        Returns the result rows as dicts, or an empty list for statements
        that produce no rows.

        Raises:
            DuplicateKeyError: a UNIQUE constraint rejected the write.
            DatabaseError: any other driver or connectivity failure. The
                connection is discarded; the next call checks out a fresh one.
        """
        try:
            with self.engine.connect() as conn:
                result = conn.execute(text(query), dict(params or {}))
                rows = [dict(row._mapping) for row in result] if result.returns_rows else []
                conn.commit()
                return rows
        except SQLAlchemyError as exc:
            if _is_duplicate_key(exc):
                raise DuplicateKeyError('duplicate_key', 'Duplicate key', code=_error_code(exc)) from exc
            category = categorize_error(exc)
            code = _error_code(exc)
            logger.error(
                'Database error: %s', describe_error(exc),
                extra={'event': 'db_error', 'category': category, 'code': code},
            )
            raise DatabaseError(category, describe_error(exc), code=code) from exc

    def check_connection(self) -> bool:
        """
        Startup handshake: check out one connection and release it.

        Logs the outcome and returns it; never raises, so an unreachable
        database at boot does not stop the process. Requests retry on demand.
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text('SELECT 1'))
        except SQLAlchemyError as exc:
            logger.error(
                'Database handshake failed: %s', describe_error(exc),
                extra={'event': 'db_error', 'category': categorize_error(exc), 'code': _error_code(exc)},
            )
            return False

        logger.info('Database connected successfully', extra={'event': 'db_connected'})
        return True

    def dispose(self) -> None:
        """Close every pooled connection (process shutdown)."""
        self.engine.dispose()


def get_pool() -> ConnectionPool:
    """Pool for the current application."""
    return current_app.extensions['pool']
