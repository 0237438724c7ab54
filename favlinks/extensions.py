"""
Flask extension instances: created here, initialized in the app factory.

This pattern (separate from __init__.py) prevents circular imports
and allows extensions to be imported independently by blueprints.

The SQLAlchemy handle is the exception: it is created per app in
``create_app`` so each app owns its engine (pool) and session model.
"""

from flask import current_app
from flask_bcrypt import Bcrypt
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_session import Session
from flask_wtf.csrf import CSRFProtect

# Password hashing: bcrypt with configurable rounds (see config.py).
bcrypt = Bcrypt()

# CSRF protection: validates tokens on all POST/PUT/DELETE requests.
csrf = CSRFProtect()

# Server-side session management: rows in the application database.
sess = Session()

# Session identity: stores only the user id; reloads the user per request.
login_manager = LoginManager()
login_manager.login_view = 'auth.login'
login_manager.login_message = 'Please log in to access this page.'
login_manager.login_message_category = 'error'

# Rate limiting: one moving window per client IP, shared by every route.
# The limit is read per request so each app's config applies.
limiter = Limiter(
    key_func=get_remote_address,
    application_limits=[lambda: current_app.config.get('APP_RATE_LIMIT', '100 per 15 minutes')],
)
