"""
Schema and server-side session store setup, with retry.

At boot the factory tries once. If the database is unreachable the app
serves signed-cookie sessions, and every request's teardown retries (at
most once per STORAGE_RETRY_INTERVAL seconds) until the schema exists and
the ``sessions`` table is in place. The switch applies from the next
request on.
"""

import logging
import threading
import time

from flask import Flask
from flask.sessions import SessionInterface
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import SQLAlchemyError

from favlinks.database import categorize_error, describe_error
from favlinks.extensions import sess
from favlinks.models import init_db

logger = logging.getLogger('favlinks.db')


class HandoffSessionInterface(SessionInterface):
    """
    Database-backed sessions installed after a late recovery.

    Requests that opened a signed-cookie session before the switch still
    save through the cookie interface they started with.
    """

    def __init__(self, store: SessionInterface, fallback: SessionInterface):
        self.store = store
        self.fallback = fallback

    def open_session(self, app, request):
        return self.store.open_session(app, request)

    def save_session(self, app, session, response):
        if hasattr(session, 'sid'):
            return self.store.save_session(app, session, response)
        return self.fallback.save_session(app, session, response)

    def regenerate(self, session) -> None:
        if hasattr(session, 'sid'):
            self.store.regenerate(session)


def setup_storage(app: Flask, db: SQLAlchemy) -> bool:
    """
    Create the application tables and the session store.

    Returns True once both are in place. Failures are logged, never raised.
    """
    pool = app.extensions['pool']
    if not pool.check_connection() or not init_db(pool.engine):
        return False

    app.config['SESSION_SQLALCHEMY'] = db
    try:
        sess.init_app(app)
    except SQLAlchemyError as exc:
        logger.error(
            'Session store unavailable: %s', describe_error(exc),
            extra={'event': 'db_error', 'category': categorize_error(exc)},
        )
        return False
    return True


def init_storage(app: Flask, db: SQLAlchemy) -> None:
    """Set up storage now, or register the retry hook until it succeeds."""
    state = {
        'ready': setup_storage(app, db),
        'next_attempt': 0.0,
        'lock': threading.Lock(),
    }
    app.extensions['storage'] = state

    @app.teardown_request
    def retry_storage_setup(exc=None) -> None:
        if state['ready'] or time.monotonic() < state['next_attempt']:
            return
        if not state['lock'].acquire(blocking=False):
            return
        try:
            if state['ready']:
                return
            state['next_attempt'] = time.monotonic() + app.config.get('STORAGE_RETRY_INTERVAL', 30)

            fallback = app.session_interface
            if not setup_storage(app, db):
                return
            app.session_interface = HandoffSessionInterface(app.session_interface, fallback)
            state['ready'] = True
            logger.info('Session store connected', extra={'event': 'db_connected'})
        finally:
            state['lock'].release()
