"""
WTForms definitions for registration and login.

Validation runs before any storage access. Every field is trimmed,
passwords included, so the hash and the later login see the same value.

Input constraints:
- Username: required, letters and digits only, 3-20 chars
- Password: required, at least 6 chars, at most 128 (bounds bcrypt work)
- Confirmation: must equal the password
"""

from flask_wtf import FlaskForm
from wtforms import PasswordField, StringField
from wtforms.validators import DataRequired, EqualTo, Length, Regexp


def strip_filter(value):
    return value.strip() if isinstance(value, str) else value


class RegisterForm(FlaskForm):
    """New account form."""

    username = StringField(
        'Username',
        filters=[strip_filter],
        validators=[
            DataRequired(message='Username is required.'),
            Regexp(r'^[A-Za-z0-9]+$', message='Username may only contain letters and numbers.'),
            Length(min=3, max=20, message='Username must be between 3 and 20 characters.'),
        ],
        render_kw={'autofocus': True, 'autocomplete': 'username'},
    )

    password = PasswordField(
        'Password',
        filters=[strip_filter],
        validators=[
            DataRequired(message='Password is required.'),
            Length(min=6, message='Password must be at least 6 characters.'),
            Length(max=128, message='Password is too long.'),
        ],
        render_kw={'autocomplete': 'new-password'},
    )

    confirm_password = PasswordField(
        'Confirm password',
        filters=[strip_filter],
        validators=[
            EqualTo('password', message='Passwords do not match.'),
        ],
        render_kw={'autocomplete': 'new-password'},
    )


class LoginForm(FlaskForm):
    """Login form; only presence and size are checked here."""

    username = StringField(
        'Username',
        filters=[strip_filter],
        validators=[
            DataRequired(message='Username is required.'),
            Length(max=20, message='Username is too long.'),
        ],
        render_kw={'autofocus': True, 'autocomplete': 'username'},
    )

    password = PasswordField(
        'Password',
        filters=[strip_filter],
        validators=[
            DataRequired(message='Password is required.'),
            Length(max=128, message='Password is too long.'),
        ],
        render_kw={'autocomplete': 'current-password'},
    )
