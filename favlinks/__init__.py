"""
Flask application factory.

Creates and configures the Flask app with its extensions, middleware and
blueprints. Each call builds an independent app (engine, pool, credential
strategy), so tests can create one per config class.

Startup order:
1. logging, so database diagnostics below are formatted
2. SQLAlchemy engine -> connection pool
3. schema and server-side sessions (retried while the database is down)
4. bcrypt, csrf, login manager, limiter
5. security headers, template helpers, blueprints, error handlers
"""

import traceback

from flask import Flask, flash, jsonify, redirect, render_template, request, url_for
from flask_sqlalchemy import SQLAlchemy
from werkzeug.exceptions import HTTPException

from favlinks.config import get_config

INVALID_BODY = 'The request body must be a JSON object with the form fields.'


def create_app(config_class=None):
    """
    Create and configure the Flask application.

    Args:
        config_class: Configuration class to use. Defaults to the class
                      selected by APP_ENV (see config.get_config).

    Returns:
        Configured Flask application instance.
    """
    if config_class is None:
        config_class = get_config()

    app = Flask(
        __name__,
        static_folder='static',
        static_url_path='/static',
    )
    app.config.from_object(config_class)
    if hasattr(config_class, 'init_app'):
        config_class.init_app(app)

    # --- Logging ---
    from favlinks.logging_config import setup_logging
    setup_logging(app)

    # --- Database: engine, pool, schema ---
    db = SQLAlchemy()
    db.init_app(app)

    from favlinks.database import ConnectionPool

    with app.app_context():
        pool = ConnectionPool(db.engine)
    app.extensions['pool'] = pool

    # --- Schema and sessions (retried per request while the database is down) ---
    from favlinks.storage import init_storage
    init_storage(app, db)

    # --- Extensions ---
    from favlinks.extensions import bcrypt, csrf, limiter, login_manager
    bcrypt.init_app(app)
    csrf.init_app(app)
    login_manager.init_app(app)
    limiter.init_app(app)
    limiter.enabled = app.config.get('RATELIMIT_ENABLED', True)

    # --- Credential Strategy ---
    from favlinks.auth.strategy import DatabaseStrategy
    app.extensions['auth_strategy'] = DatabaseStrategy(pool)

    # --- Security Headers & Templates ---
    from favlinks.headers import init_security_headers
    from favlinks.helpers import init_template_helpers
    init_security_headers(app)
    init_template_helpers(app)

    # --- Blueprints (mount order: home, auth, links) ---
    from favlinks.auth import auth_bp
    from favlinks.home import home_bp
    from favlinks.links import links_bp
    app.register_blueprint(home_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(links_bp)

    register_request_guards(app)
    register_error_handlers(app)

    return app


def register_request_guards(app: Flask) -> None:
    @app.before_request
    def reject_non_object_json():
        """
        Form views read JSON bodies as field mappings; anything else
        (arrays, scalars, malformed JSON) is turned away like a bad form.
        """
        if request.method != 'POST' or not request.is_json:
            return None
        if isinstance(request.get_json(silent=True), dict):
            return None
        flash(INVALID_BODY, 'error')
        return redirect(request.path)


def register_error_handlers(app: Flask) -> None:
    from flask_wtf.csrf import CSRFError

    from favlinks.auth.strategy import log_csrf_failure, log_rate_limited

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e):
        """Send the user back to the form for a fresh token."""
        log_csrf_failure()
        flash('Your form session has expired. Please try again.', 'error')
        return redirect(request.path if request.method == 'POST' else url_for('home.index'))

    @app.errorhandler(429)
    def handle_rate_limit(e):
        """Rate limit exceeded: structured JSON body."""
        log_rate_limited(str(e.description))
        return jsonify(
            error='Too many requests from this IP, please try again after 15 minutes.',
        ), 429

    @app.errorhandler(404)
    def handle_not_found(e):
        return render_template('errors/404.html'), 404

    @app.errorhandler(413)
    def handle_request_too_large(e):
        """Request body exceeds MAX_CONTENT_LENGTH (16KB)."""
        return render_template('errors/413.html'), 413

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        """
        Last-resort handler.

        HTTP errors keep their own status. Anything else is a 500: JSON with
        message and stack in development, a generic page elsewhere.
        """
        if isinstance(e, HTTPException):
            return e

        app.logger.exception('Unhandled error on %s %s', request.method, request.path)

        if app.config.get('ENV_NAME') == 'development':
            return jsonify(
                error=True,
                message=str(e),
                stack=''.join(traceback.format_exception(type(e), e, e.__traceback__)),
            ), 500

        return render_template('errors/500.html'), 500
