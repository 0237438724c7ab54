"""
Tests for link CRUD: list ordering, add/edit validation, not-found
handling, idempotent delete, and storage-failure fallbacks.
"""

import pytest

from favlinks.database import CONNECTION_LOST, DatabaseError
from tests.helpers import add_link, count_rows, only_link


def broken(*args, **kwargs):
    raise DatabaseError(CONNECTION_LOST, 'The database connection was closed')


class TestListLinks:
    """Tests for GET /links."""

    def test_empty_list(self, client):
        response = client.get('/links')
        assert response.status_code == 200
        assert b'No links saved yet.' in response.data

    def test_no_trailing_slash_needed(self, client):
        assert client.get('/links').status_code == 200
        assert client.get('/links/').status_code == 200

    def test_newest_first(self, client):
        add_link(client, title='First', url='https://first.example.com')
        add_link(client, title='Docs', url='https://example.com')
        html = client.get('/links').data.decode()
        assert html.index('Docs') < html.index('First')

    def test_shows_relative_time(self, client):
        add_link(client)
        response = client.get('/links')
        assert b'just now' in response.data or b'ago' in response.data

    def test_storage_failure_renders_empty_list(self, client, monkeypatch):
        add_link(client)
        monkeypatch.setattr('favlinks.links.models.list_links', broken)
        response = client.get('/links')
        assert response.status_code == 200
        assert b'Could not load links.' in response.data
        assert b'No links saved yet.' in response.data


class TestAddLink:
    """Tests for GET/POST /links/add."""

    def test_add_form_renders(self, client):
        response = client.get('/links/add')
        assert response.status_code == 200
        assert b'name="title"' in response.data

    def test_add_then_list(self, client, pool):
        response = add_link(client, title='Docs', url='https://example.com', description='')
        assert response.status_code == 302
        assert '/links' in response.headers['Location']

        link = only_link(pool)
        assert (link['title'], link['url'], link['description']) == ('Docs', 'https://example.com', '')

        listing = client.get('/links')
        assert b'Docs' in listing.data
        assert b'https://example.com' in listing.data

    def test_success_notice(self, client):
        response = add_link(client, follow_redirects=True)
        assert b'Link saved successfully.' in response.data

    def test_fields_are_trimmed(self, client, pool):
        add_link(client, title='  Python docs  ', url='  https://docs.python.org  ', description='  reference  ')
        link = only_link(pool)
        assert link['title'] == 'Python docs'
        assert link['url'] == 'https://docs.python.org'
        assert link['description'] == 'reference'

    def test_json_body_accepted(self, client, pool):
        response = client.post('/links/add', json={'title': 'Docs', 'url': 'http://example.com'})
        assert response.status_code == 302
        link = only_link(pool)
        assert link['url'] == 'http://example.com'
        assert link['description'] == ''

    def test_boundary_lengths_accepted(self, client, pool):
        add_link(client, title='a' * 100, description='d' * 500)
        assert count_rows(pool, 'links') == 1
        add_link(client, title='abc')
        assert count_rows(pool, 'links') == 2

    def test_two_character_title_rejected(self, client, pool):
        response = add_link(client, title='ab')
        assert response.status_code == 302
        assert '/links/add' in response.headers['Location']
        assert count_rows(pool, 'links') == 0

    def test_rejection_flashes_field_message(self, client):
        response = client.post('/links/add', data={
            'title': 'ab', 'url': 'https://example.com', 'description': '',
        }, follow_redirects=True)
        assert b'Title must be between 3 and 100 characters.' in response.data

    def test_long_title_rejected(self, client, pool):
        add_link(client, title='a' * 101)
        assert count_rows(pool, 'links') == 0

    def test_whitespace_only_title_rejected(self, client, pool):
        add_link(client, title='     ')
        assert count_rows(pool, 'links') == 0

    def test_long_description_rejected(self, client, pool):
        response = client.post('/links/add', data={
            'title': 'Docs', 'url': 'https://example.com', 'description': 'd' * 501,
        }, follow_redirects=True)
        assert b'Description cannot exceed 500 characters.' in response.data
        assert count_rows(pool, 'links') == 0

    @pytest.mark.parametrize('url', [
        '',
        'example.com',
        'ftp://example.com',
        'javascript:alert(1)',
        'https://',
        '//example.com',
    ])
    def test_invalid_urls_rejected(self, client, pool, url):
        add_link(client, url=url)
        assert count_rows(pool, 'links') == 0

    def test_storage_failure_redirects_to_form(self, client, monkeypatch):
        monkeypatch.setattr('favlinks.links.models.create_link', broken)
        response = add_link(client)
        assert response.status_code == 302
        assert '/links/add' in response.headers['Location']

        page = client.get('/links/add')
        assert b'Could not save the link.' in page.data


class TestEditLink:
    """Tests for GET/POST /links/edit/<id>."""

    @pytest.fixture
    def link_id(self, client, pool):
        add_link(client, title='Docs', url='https://example.com', description='original')
        return only_link(pool)['id']

    def test_edit_form_prefilled(self, client, link_id):
        response = client.get(f'/links/edit/{link_id}')
        assert response.status_code == 200
        assert b'value="Docs"' in response.data
        assert b'original' in response.data

    def test_edit_updates_row(self, client, pool, link_id):
        response = client.post(f'/links/edit/{link_id}', data={
            'title': ' Updated ', 'url': 'https://updated.example.com', 'description': '',
        })
        assert response.status_code == 302
        assert response.headers['Location'].rstrip('/').endswith('/links')

        link = only_link(pool)
        assert link['title'] == 'Updated'
        assert link['url'] == 'https://updated.example.com'
        assert link['description'] == ''

    def test_edit_success_notice(self, client, link_id):
        response = client.post(f'/links/edit/{link_id}', data={
            'title': 'Updated', 'url': 'https://example.com', 'description': '',
        }, follow_redirects=True)
        assert b'Link updated successfully.' in response.data

    def test_edit_validation_redirects_to_same_form(self, client, pool, link_id):
        response = client.post(f'/links/edit/{link_id}', data={
            'title': 'ab', 'url': 'https://example.com', 'description': '',
        })
        assert response.status_code == 302
        assert f'/links/edit/{link_id}' in response.headers['Location']
        assert only_link(pool)['title'] == 'Docs'

    def test_edit_missing_link_get(self, client):
        response = client.get('/links/edit/9999')
        assert response.status_code == 302
        assert response.headers['Location'].rstrip('/').endswith('/links')

        page = client.get('/links')
        assert b'Link not found.' in page.data

    def test_edit_missing_link_post_does_not_update(self, client, pool, link_id):
        response = client.post('/links/edit/9999', data={
            'title': 'Updated', 'url': 'https://example.com', 'description': '',
        }, follow_redirects=True)
        assert b'Link not found.' in response.data
        assert only_link(pool)['title'] == 'Docs'

    def test_storage_failure_redirects_to_same_form(self, client, link_id, monkeypatch):
        monkeypatch.setattr('favlinks.links.models.update_link', broken)
        response = client.post(f'/links/edit/{link_id}', data={
            'title': 'Updated', 'url': 'https://example.com', 'description': '',
        })
        assert response.status_code == 302
        assert f'/links/edit/{link_id}' in response.headers['Location']

    def test_non_numeric_id_is_404(self, client):
        assert client.get('/links/edit/abc').status_code == 404


class TestDeleteLink:
    """Tests for GET /links/delete/<id>."""

    def test_delete_removes_row(self, client, pool):
        add_link(client)
        link_id = only_link(pool)['id']
        response = client.get(f'/links/delete/{link_id}', follow_redirects=True)
        assert b'Link deleted successfully.' in response.data
        assert count_rows(pool, 'links') == 0

    def test_delete_missing_link_is_idempotent(self, client, pool):
        add_link(client)
        response = client.get('/links/delete/9999')
        assert response.status_code == 302
        assert response.headers['Location'].rstrip('/').endswith('/links')

        page = client.get('/links')
        assert b'Link deleted successfully.' in page.data
        assert count_rows(pool, 'links') == 1

    def test_storage_failure_flashes_error(self, client, monkeypatch):
        monkeypatch.setattr('favlinks.links.models.delete_link', broken)
        response = client.get('/links/delete/1', follow_redirects=True)
        assert b'Could not delete the link.' in response.data


class TestOptionalLoginGate:
    """LINKS_LOGIN_REQUIRED keeps anonymous users out of /links."""

    def test_open_by_default(self, client):
        assert client.get('/links').status_code == 200

    def test_anonymous_redirected_when_required(self, app, client):
        app.config['LINKS_LOGIN_REQUIRED'] = True
        response = client.get('/links')
        assert response.status_code == 302
        assert '/auth/login' in response.headers['Location']

    def test_authenticated_allowed_when_required(self, app, authenticated_client):
        app.config['LINKS_LOGIN_REQUIRED'] = True
        assert authenticated_client.get('/links').status_code == 200


class TestJsonBodies:
    """JSON bodies must be objects carrying the form fields."""

    @pytest.mark.parametrize('body', [['a', 'b'], 'Docs', 42, True])
    def test_non_object_json_redirects_to_form(self, client, pool, body):
        response = client.post('/links/add', json=body)
        assert response.status_code == 302
        assert '/links/add' in response.headers['Location']
        assert count_rows(pool, 'links') == 0

    def test_non_object_json_flashes_message(self, client):
        response = client.post('/links/add', json=['a', 'b'], follow_redirects=True)
        assert b'must be a JSON object' in response.data

    def test_malformed_json_redirects_to_form(self, client, pool):
        response = client.post('/links/add', data='{"title": ', content_type='application/json')
        assert response.status_code == 302
        assert count_rows(pool, 'links') == 0

    def test_array_body_on_edit(self, client, pool):
        add_link(client)
        link_id = only_link(pool)['id']
        response = client.post(f'/links/edit/{link_id}', json=[1, 2, 3])
        assert response.status_code == 302
        assert f'/links/edit/{link_id}' in response.headers['Location']
        assert only_link(pool)['title'] == 'Docs'
