"""
User records: lookups and inserts against the ``users`` table.

All access goes through the connection pool with named parameters.
The password hash only leaves this module inside ``UserRecord``, which
the credential strategy consumes; views only ever see ``User``.
"""

from dataclasses import dataclass
from typing import Optional

from flask_login import UserMixin

from favlinks.database import ConnectionPool


@dataclass(frozen=True)
class User(UserMixin):
    """Minimal user projection kept on ``current_user``."""

    id: int
    username: str

    def get_id(self) -> str:
        return str(self.id)


@dataclass(frozen=True)
class UserRecord:
    """Full row, including the bcrypt hash, used only for verification."""

    id: int
    username: str
    password: str

    def to_user(self) -> User:
        return User(id=self.id, username=self.username)


def get_user_by_username(pool: ConnectionPool, username: str) -> Optional[UserRecord]:
    rows = pool.execute(
        'SELECT id, username, password FROM users WHERE username = :username',
        {'username': username},
    )
    if not rows:
        return None
    row = rows[0]
    return UserRecord(id=row['id'], username=row['username'], password=row['password'])


def get_user_by_id(pool: ConnectionPool, user_id: int) -> Optional[User]:
    rows = pool.execute(
        'SELECT id, username FROM users WHERE id = :id',
        {'id': user_id},
    )
    if not rows:
        return None
    return User(id=rows[0]['id'], username=rows[0]['username'])


def username_exists(pool: ConnectionPool, username: str) -> bool:
    rows = pool.execute(
        'SELECT id FROM users WHERE username = :username',
        {'username': username},
    )
    return bool(rows)


def create_user(pool: ConnectionPool, username: str, password_hash: str) -> None:
    """
    Insert a user row.

    Raises:
        DuplicateKeyError: the username was taken between lookup and insert.
    """
    pool.execute(
        'INSERT INTO users (username, password) VALUES (:username, :password)',
        {'username': username, 'password': password_hash},
    )
