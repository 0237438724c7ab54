"""
Link queries against the ``links`` table.

Every function raises ``DatabaseError`` on storage failure; the views
decide how to report it.
"""

from typing import Any, Dict, List, Optional

from favlinks.database import ConnectionPool

_COLUMNS = 'id, title, url, description, created_at'


def list_links(pool: ConnectionPool) -> List[Dict[str, Any]]:
    """All links, newest first (id breaks ties within the same second)."""
    return pool.execute(f'SELECT {_COLUMNS} FROM links ORDER BY created_at DESC, id DESC')


def get_link(pool: ConnectionPool, link_id: int) -> Optional[Dict[str, Any]]:
    rows = pool.execute(f'SELECT {_COLUMNS} FROM links WHERE id = :id', {'id': link_id})
    return rows[0] if rows else None


def create_link(pool: ConnectionPool, title: str, url: str, description: str) -> None:
    pool.execute(
        'INSERT INTO links (title, url, description) VALUES (:title, :url, :description)',
        {'title': title, 'url': url, 'description': description},
    )


def update_link(pool: ConnectionPool, link_id: int, title: str, url: str, description: str) -> None:
    pool.execute(
        'UPDATE links SET title = :title, url = :url, description = :description WHERE id = :id',
        {'id': link_id, 'title': title, 'url': url, 'description': description},
    )


def delete_link(pool: ConnectionPool, link_id: int) -> None:
    """Delete by id; a missing row is not an error."""
    pool.execute('DELETE FROM links WHERE id = :id', {'id': link_id})
