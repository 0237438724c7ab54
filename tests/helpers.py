"""Shared builders, assertions and lookups for the test suite."""

from favlinks import create_app


def make_app(base_config, tmp_path, **overrides):
    """Build an app whose database lives in tmp_path."""
    attrs = {'SQLALCHEMY_DATABASE_URI': f'sqlite:///{tmp_path / "test.db"}'}
    attrs.update(overrides)
    config = type(f'Temp{base_config.__name__}', (base_config,), attrs)
    return create_app(config)


def count_rows(pool, table, where='1 = 1', params=None):
    rows = pool.execute(f'SELECT COUNT(*) AS n FROM {table} WHERE {where}', params or {})
    return rows[0]['n']


def only_link(pool):
    rows = pool.execute('SELECT id, title, url, description FROM links')
    assert len(rows) == 1
    return rows[0]


def add_link(client, title='Docs', url='https://example.com', description='', **kwargs):
    return client.post('/links/add', data={
        'title': title,
        'url': url,
        'description': description,
    }, **kwargs)
