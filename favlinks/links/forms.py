"""
Link form: shared by the add and edit views.

Every field is trimmed before validation:
- Title: required, 3-100 chars
- URL: required, absolute, scheme http or https
- Description: optional, at most 500 chars
"""

from urllib.parse import urlsplit

from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, URLField
from wtforms.validators import URL, DataRequired, Length, Optional, StopValidation

from favlinks.auth.forms import strip_filter

ALLOWED_SCHEMES = ('http', 'https')
URL_MESSAGE = 'Please enter a valid URL starting with http:// or https://.'


def http_url(form, field):
    """Reject anything that is not an absolute http(s) URL with a host."""
    parts = urlsplit(field.data or '')
    if parts.scheme.lower() not in ALLOWED_SCHEMES or not parts.netloc:
        raise StopValidation(URL_MESSAGE)


def none_to_empty(value):
    return '' if value is None else value


class LinkForm(FlaskForm):
    """Create or update a bookmark."""

    title = StringField(
        'Title',
        filters=[strip_filter],
        validators=[
            DataRequired(message='Title is required.'),
            Length(min=3, max=100, message='Title must be between 3 and 100 characters.'),
        ],
        render_kw={'autofocus': True},
    )

    url = URLField(
        'URL',
        filters=[strip_filter],
        validators=[
            DataRequired(message='URL is required.'),
            http_url,
            URL(message=URL_MESSAGE),
        ],
        render_kw={'placeholder': 'https://example.com'},
    )

    description = TextAreaField(
        'Description',
        filters=[none_to_empty, strip_filter],
        validators=[
            Optional(),
            Length(max=500, message='Description cannot exceed 500 characters.'),
        ],
        render_kw={'rows': 3},
    )

    def link_values(self) -> dict:
        """Trimmed field values, ready for the links table."""
        return {
            'title': self.title.data,
            'url': self.url.data,
            'description': self.description.data or '',
        }
