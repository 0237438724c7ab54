"""
Links blueprint: list, add, edit, and delete bookmarks under /links.
"""

from flask import Blueprint

links_bp = Blueprint(
    'links',
    __name__,
    url_prefix='/links',
)

from favlinks.links import routes  # noqa: E402, F401
