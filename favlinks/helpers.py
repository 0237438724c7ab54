"""
Jinja2 helpers shared by all templates, plus form-error flashing for views.
"""

from datetime import datetime, timezone
from typing import Optional, Union

import timeago as timeago_lib
from flask import flash


def _as_utc(value: Union[datetime, str]) -> Optional[datetime]:
    # SQLite hands back CURRENT_TIMESTAMP as 'YYYY-MM-DD HH:MM:SS' text.
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    # Database timestamps are stored in UTC without an offset.
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def timeago(value: Union[datetime, str, None], now: Optional[datetime] = None) -> str:
    """
    Render a timestamp relative to now, e.g. '5 minutes ago'.

    Unparseable values are returned unchanged so the page still renders.
    """
    if value is None:
        return ''
    moment = _as_utc(value)
    if moment is None:
        return str(value)
    return timeago_lib.format(moment, now or datetime.now(timezone.utc))


def init_template_helpers(app) -> None:
    """Register filters and globals on the app's Jinja environment."""
    app.add_template_filter(timeago, 'timeago')

    @app.context_processor
    def inject_app_env() -> dict:
        return {'app_env': app.config.get('ENV_NAME', 'development')}


def flash_form_errors(form) -> None:
    """Flash every field error of a failed WTForms validation, in field order."""
    for field in form:
        for error in field.errors:
            flash(error, 'error')
