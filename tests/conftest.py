"""
Pytest fixtures for the favlinks test suite.

Every app gets its own SQLite file under tmp_path, so tests never share
users, links, or sessions:
- app/client: base test config (CSRF off, rate limiting off)
- csrf_app/csrf_client: CSRF enabled
- rate_limit_app/rate_limit_client: rate limiting enabled
"""

import pytest

from favlinks.config import CSRFTestConfig, RateLimitTestConfig, TestConfig
from tests.helpers import make_app

USERNAME = 'alice'
PASSWORD = 'secret123'


@pytest.fixture
def app(tmp_path):
    """Flask app with the base test configuration."""
    yield make_app(TestConfig, tmp_path)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def pool(app):
    """The app's connection pool, for seeding and inspecting rows."""
    return app.extensions['pool']


@pytest.fixture
def csrf_app(tmp_path):
    yield make_app(CSRFTestConfig, tmp_path)


@pytest.fixture
def csrf_client(csrf_app):
    return csrf_app.test_client()


@pytest.fixture
def rate_limit_app(tmp_path):
    yield make_app(RateLimitTestConfig, tmp_path)


@pytest.fixture
def rate_limit_client(rate_limit_app):
    return rate_limit_app.test_client()


@pytest.fixture
def registered_user(client):
    """Register alice/secret123 through the real registration flow."""
    response = client.post('/auth/register', data={
        'username': USERNAME,
        'password': PASSWORD,
        'confirm_password': PASSWORD,
    })
    assert response.status_code == 302
    return {'username': USERNAME, 'password': PASSWORD}


@pytest.fixture
def authenticated_client(client, registered_user):
    """Test client that is already logged in as alice."""
    response = client.post('/auth/login', data=registered_user)
    assert response.status_code == 302
    return client

