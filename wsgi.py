"""
WSGI entry point for production deployment (gunicorn).

Usage:
    gunicorn -c gunicorn.conf.py wsgi:app

Builds the app with ProductionConfig after checking that the required
environment variables are set.
"""

import sys

from favlinks.config import ProductionConfig

# Fail fast with a clear message if SESSION_SECRET is missing.
if not ProductionConfig.SECRET_KEY:
    print(
        'FATAL: SESSION_SECRET environment variable is required.\n'
        'Generate one with: python -c "import secrets; print(secrets.token_hex(32))"',
        file=sys.stderr,
    )
    sys.exit(1)

from favlinks import create_app  # noqa: E402

app = create_app(config_class=ProductionConfig)
