"""
Authentication routes: register, login, logout.

Request flow (login POST):
1. Rate limiter (application-wide, per IP)
2. CSRF validation (flask-wtf before_request hook)
3. WTForms validation: required fields, before any storage access
4. Credential strategy: user lookup, then constant-time bcrypt comparison
5. Session established with the user id only (Flask-Login)

Every failure flashes a message and redirects back to the form.
"""

import uuid

from flask import current_app, flash, g, redirect, render_template, request, session, url_for
from flask_login import current_user, login_user, logout_user

from favlinks.auth import auth_bp
from favlinks.auth.forms import LoginForm, RegisterForm
from favlinks.auth.models import create_user, username_exists
from favlinks.auth.strategy import (
    get_strategy,
    hash_password,
    log_login_failed,
    log_login_success,
    log_logout,
    log_register_failed,
    log_register_success,
)
from favlinks.database import DatabaseError, DuplicateKeyError, get_pool
from favlinks.helpers import flash_form_errors

DUPLICATE_USERNAME = 'Username is already taken.'


# --- Request Hooks ---

@auth_bp.before_app_request
def set_request_id() -> None:
    """Short per-request ID for log correlation."""
    g.request_id = str(uuid.uuid4())[:8]


# --- Session Rotation ---

def rotate_session() -> None:
    """
    Move the session to a fresh id and empty it.

    The server-side store deletes the row kept under the old id, so a
    token captured before login or logout is dead afterwards. Signed-cookie
    sessions carry no id; clearing them is enough.
    """
    regenerate = getattr(current_app.session_interface, 'regenerate', None)
    if regenerate is not None:
        regenerate(session)
    session.clear()


# --- Routes ---

@auth_bp.route('/register', methods=['GET', 'POST'])
def register():
    """
    Registration view.

    Duplicate usernames are rejected without a write. A racing insert that
    trips the UNIQUE constraint gets the same message.
    """
    form = RegisterForm()

    if request.method == 'GET':
        return render_template('auth/register.html', form=form)

    if not form.validate_on_submit():
        flash_form_errors(form)
        return redirect(url_for('auth.register'))

    username = form.username.data
    pool = get_pool()

    try:
        if username_exists(pool, username):
            log_register_failed(username, reason='duplicate_username')
            flash(DUPLICATE_USERNAME, 'error')
            return redirect(url_for('auth.register'))

        create_user(pool, username, hash_password(form.password.data))
    except DuplicateKeyError:
        log_register_failed(username, reason='duplicate_username')
        flash(DUPLICATE_USERNAME, 'error')
        return redirect(url_for('auth.register'))
    except DatabaseError as exc:
        log_register_failed(username, reason=exc.category)
        flash('Could not create the account. Please try again.', 'error')
        return redirect(url_for('auth.register'))

    log_register_success(username)
    flash('Account created. Please log in.', 'success')
    return redirect(url_for('auth.login'))


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    """Login view: renders the form on GET, authenticates on POST."""
    if current_user.is_authenticated:
        return redirect(url_for('links.list_links'))

    form = LoginForm()

    if request.method == 'GET':
        return render_template('auth/login.html', form=form)

    if not form.validate_on_submit():
        flash_form_errors(form)
        return redirect(url_for('auth.login'))

    username = form.username.data

    try:
        result = get_strategy().verify(username, form.password.data)
    except DatabaseError as exc:
        log_login_failed(username, reason=exc.category)
        flash('Login is temporarily unavailable. Please try again.', 'error')
        return redirect(url_for('auth.login'))

    if not result.ok:
        log_login_failed(username, reason=result.message)
        flash(result.message, 'error')
        return redirect(url_for('auth.login'))

    # Drop anything stored before authentication, then keep only the user id.
    rotate_session()
    login_user(result.user)
    session.permanent = True  # Activates PERMANENT_SESSION_LIFETIME (24h)

    log_login_success(username)
    return redirect(url_for('links.list_links'))


@auth_bp.route('/logout')
def logout():
    """
    Destroy the session and return to the login page.

    Errors while clearing the session propagate to the global error handler.
    """
    username = current_user.username if current_user.is_authenticated else None

    rotate_session()
    logout_user()

    if username is not None:
        log_logout(username)

    flash('You have been logged out.', 'success')
    return redirect(url_for('auth.login'))
