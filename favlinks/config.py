"""
Application configuration, read from the environment.

Values come from environment variables (a local ``.env`` file is loaded
first when present) with defaults suitable for local development.
"""

import os
import secrets

from dotenv import load_dotenv
from sqlalchemy.engine import URL

load_dotenv()


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name, '')
    try:
        return int(value)
    except ValueError:
        return default


def build_database_uri() -> str:
    """
    Build the SQLAlchemy URL for the application database.

    DATABASE_URL wins when set (e.g. ``sqlite:///links.db`` for local work);
    otherwise the MySQL URL is assembled from the DB_* variables.
    """
    explicit = os.environ.get('DATABASE_URL')
    if explicit:
        return explicit

    url = URL.create(
        'mysql+mysqlconnector',
        username=os.environ.get('DB_USER', 'root'),
        password=os.environ.get('DB_PASSWORD', ''),
        host=os.environ.get('DB_HOST', 'localhost'),
        port=_env_int('DB_PORT', 3306),
        database=os.environ.get('DB_NAME', 'db_links'),
    )
    return url.render_as_string(hide_password=False)


def current_env() -> str:
    """Deployment environment name; APP_ENV first, NODE_ENV accepted too."""
    return (
        os.environ.get('APP_ENV')
        or os.environ.get('NODE_ENV')
        or 'development'
    ).lower()


class BaseConfig:
    """Shared configuration for all environments."""

    ENV_NAME = 'development'

    # --- Server ---
    PORT = _env_int('PORT', 4000)

    # --- Flask Core ---
    # Signs the session cookie and CSRF tokens.
    SECRET_KEY = os.environ.get('SESSION_SECRET') or secrets.token_hex(32)

    # Declared for token-based clients; no current route issues tokens.
    JWT_SECRET = os.environ.get('JWT_SECRET', 'jwt_secret_change_in_production')

    # Link forms are well under 1KB; anything near this is not a form post.
    MAX_CONTENT_LENGTH = 16 * 1024  # 16KB

    # --- Database (Flask-SQLAlchemy engine doubles as the pool) ---
    SQLALCHEMY_DATABASE_URI = build_database_uri()
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': _env_int('DB_POOL_SIZE', 10),
        'max_overflow': _env_int('DB_MAX_OVERFLOW', 5),
        'pool_pre_ping': True,  # Drop connections the server closed while idle
        'pool_recycle': 3600,
    }
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Seconds between attempts to create the schema and session table while
    # the database is unreachable.
    STORAGE_RETRY_INTERVAL = _env_int('STORAGE_RETRY_INTERVAL', 30)

    # --- Session Configuration (flask-session) ---
    # Server-side sessions in the application database; the cookie holds an opaque ID.
    SESSION_TYPE = 'sqlalchemy'
    SESSION_SQLALCHEMY_TABLE = 'sessions'
    SESSION_PERMANENT = True
    PERMANENT_SESSION_LIFETIME = 24 * 60 * 60  # 24 hours
    SESSION_KEY_PREFIX = 'session:'

    # --- Session Cookie Flags ---
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_NAME = 'session'

    # --- bcrypt ---
    BCRYPT_LOG_ROUNDS = 10

    # --- Rate Limiting (flask-limiter) ---
    RATELIMIT_ENABLED = True
    # In-process counters are per worker; several workers need a shared store
    # such as redis:// (see gunicorn.conf.py).
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    # Sliding window: a burst at the end of one window can't be followed
    # by a fresh burst at the start of the next.
    RATELIMIT_STRATEGY = 'moving-window'
    RATELIMIT_HEADERS_ENABLED = True
    # Shared across every route, keyed by client IP.
    APP_RATE_LIMIT = '100 per 15 minutes'

    # --- Links ---
    # The link list is shared by every account; set to require a login to see it.
    LINKS_LOGIN_REQUIRED = os.environ.get('LINKS_LOGIN_REQUIRED', '').lower() in ('1', 'true', 'yes')


class ProductionConfig(BaseConfig):
    """Production environment: secure cookies, generic error pages."""

    ENV_NAME = 'production'
    DEBUG = False
    TESTING = False

    # Never fall back to a random key: it would invalidate sessions on restart.
    SECRET_KEY = os.environ.get('SESSION_SECRET')

    SESSION_COOKIE_SECURE = True

    @classmethod
    def init_app(cls, app):
        """Validate required configuration at startup."""
        if not cls.SECRET_KEY:
            raise RuntimeError(
                'SESSION_SECRET environment variable is required in production. '
                'Generate one with: python -c "import secrets; print(secrets.token_hex(32))"'
            )


class DevelopmentConfig(BaseConfig):
    """Development environment: relaxed cookie settings for HTTP."""

    DEBUG = True
    SESSION_COOKIE_SECURE = False


class TestConfig(BaseConfig):
    """Test environment: SQLite, fast bcrypt, CSRF/rate-limiting off by default."""

    ENV_NAME = 'test'
    TESTING = True
    SESSION_COOKIE_SECURE = False
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    # 4 rounds keeps each hash at a few milliseconds.
    BCRYPT_LOG_ROUNDS = 4
    RATELIMIT_ENABLED = False
    WTF_CSRF_ENABLED = False
    RATELIMIT_STORAGE_URI = 'memory://'
    STORAGE_RETRY_INTERVAL = 0
    LINKS_LOGIN_REQUIRED = False


class RateLimitTestConfig(TestConfig):
    """Test config with rate limiting enabled."""

    RATELIMIT_ENABLED = True


class CSRFTestConfig(TestConfig):
    """Test config with CSRF protection enabled."""

    WTF_CSRF_ENABLED = True


_CONFIGS = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'test': TestConfig,
}


def get_config(env: str = None):
    """Map an environment name (defaults to APP_ENV) to its config class."""
    return _CONFIGS.get(env or current_env(), DevelopmentConfig)
