"""
Credential verification strategy and audit helpers.

A strategy has two operations, invoked at fixed points of the request
lifecycle:
- ``verify(username, password)`` on a login POST;
- ``load_by_id(user_id)`` by Flask-Login's user loader on every request
  that carries a session identity.

The app factory builds one ``DatabaseStrategy`` and stores it in
``app.extensions['auth_strategy']``; tests or other deployments can
swap in any object with the same two methods.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from flask import current_app, g, request

from favlinks.auth.models import User, get_user_by_id, get_user_by_username
from favlinks.database import ConnectionPool, DatabaseError
from favlinks.extensions import bcrypt, login_manager
from favlinks.logging_config import audit_log, sanitize_log_value

USER_NOT_FOUND = 'User not found.'
INCORRECT_PASSWORD = 'Incorrect password.'


@dataclass(frozen=True)
class VerifyResult:
    """Outcome of a credential check: a user, or a user-facing failure message."""

    user: Optional[User] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.user is not None


class CredentialStrategy(ABC):
    """Interface for pluggable credential verification."""

    @abstractmethod
    def verify(self, username: str, password: str) -> VerifyResult:
        """Check a username/password pair; failures carry a user-facing message."""

    @abstractmethod
    def load_by_id(self, user_id: int) -> Optional[User]:
        """The user for a session id, or None if it no longer exists."""


class DatabaseStrategy(CredentialStrategy):
    """Checks credentials against bcrypt hashes in the ``users`` table."""

    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    def verify(self, username: str, password: str) -> VerifyResult:
        """
        Look the user up and compare the password with the stored hash.

        bcrypt's comparison is constant-time. Storage failures propagate as
        ``DatabaseError`` so the caller can tell them apart from bad credentials.
        """
        record = get_user_by_username(self.pool, username)
        if record is None:
            return VerifyResult(message=USER_NOT_FOUND)

        if not bcrypt.check_password_hash(record.password, password):
            return VerifyResult(message=INCORRECT_PASSWORD)

        return VerifyResult(user=record.to_user())

    def load_by_id(self, user_id: int) -> Optional[User]:
        return get_user_by_id(self.pool, user_id)


def get_strategy() -> CredentialStrategy:
    return current_app.extensions['auth_strategy']


def hash_password(password: str) -> str:
    """bcrypt hash with the configured cost factor (BCRYPT_LOG_ROUNDS)."""
    return bcrypt.generate_password_hash(password).decode('utf-8')


@login_manager.user_loader
def load_user(user_id: str) -> Optional[User]:
    """
    Resolve the session's user id to a fresh ``User`` on each request.

    A malformed id, a deleted user, or a storage failure all leave the
    request anonymous; protected views then send the user to the login page.
    """
    try:
        return get_strategy().load_by_id(int(user_id))
    except ValueError:
        return None
    except DatabaseError as exc:
        audit_log(
            event='session_load_failed',
            message='Could not load user from session',
            level=logging.WARNING,
            reason=exc.category,
            **get_request_context(),
        )
        return None


# --- Audit Helpers ---

def get_request_context() -> dict:
    """
    Security-relevant context from the current request.

    User-agent is truncated to 200 chars to keep crafted strings from
    bloating the log.
    """
    return {
        'ip': request.remote_addr or 'unknown',
        'user_agent': sanitize_log_value(
            request.headers.get('User-Agent', 'unknown'),
            max_length=200,
        ),
        'request_id': g.get('request_id', 'unknown'),
    }


def log_register_success(username: str) -> None:
    audit_log(
        event='register_success',
        message=f'Registered user {sanitize_log_value(username)}',
        username=username,
        **get_request_context(),
    )


def log_register_failed(username: str, reason: str) -> None:
    audit_log(
        event='register_failed',
        message=f'Registration failed for {sanitize_log_value(username)}: {reason}',
        username=username,
        reason=reason,
        **get_request_context(),
    )


def log_login_success(username: str) -> None:
    audit_log(
        event='login_success',
        message=f'Successful login for {sanitize_log_value(username)}',
        username=username,
        **get_request_context(),
    )


def log_login_failed(username: str, reason: str) -> None:
    audit_log(
        event='login_failed',
        message=f'Failed login for {sanitize_log_value(username)}: {reason}',
        username=username,
        reason=reason,
        **get_request_context(),
    )


def log_logout(username: str) -> None:
    audit_log(
        event='logout',
        message=f'Logout for {sanitize_log_value(username)}',
        username=username,
        **get_request_context(),
    )


def log_csrf_failure() -> None:
    audit_log(
        event='csrf_failure',
        message='CSRF token validation failed',
        level=logging.WARNING,
        **get_request_context(),
    )


def log_rate_limited(limit: str) -> None:
    audit_log(
        event='rate_limit_exceeded',
        message=f'Rate limit exceeded ({limit})',
        level=logging.WARNING,
        **get_request_context(),
    )
