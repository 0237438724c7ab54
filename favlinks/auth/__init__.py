"""
Authentication blueprint: register, login, and logout under /auth.
"""

from flask import Blueprint

auth_bp = Blueprint(
    'auth',
    __name__,
    url_prefix='/auth',
)

# Import routes to register them with the blueprint.
# This import must be at the bottom to avoid circular imports.
from favlinks.auth import routes  # noqa: E402, F401
