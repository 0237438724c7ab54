"""
Security response headers, applied via @app.after_request to every response.

Scripts and inline styles are allowed only with the per-request CSP nonce,
which templates read as ``csp_nonce``.
"""

import secrets

from flask import Flask, g, request

# Headers that never vary between responses.
STATIC_HEADERS = {
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'Referrer-Policy': 'strict-origin-when-cross-origin',
    'Permissions-Policy': 'camera=(), microphone=(), geolocation=(), payment=()',
    'Cross-Origin-Opener-Policy': 'same-origin',
    'Cross-Origin-Resource-Policy': 'same-origin',
    'X-Permitted-Cross-Domain-Policies': 'none',
}

HSTS_VALUE = 'max-age=31536000; includeSubDomains'
NO_STORE = 'no-store, no-cache, must-revalidate, max-age=0'


def generate_csp_nonce() -> str:
    """256-bit random nonce, fresh for every request."""
    return secrets.token_urlsafe(32)


def build_csp(nonce: str) -> str:
    """
    Content-Security-Policy for HTML pages.

    Links point at arbitrary sites, but the pages themselves only load
    same-origin assets; form posts stay on this origin.
    """
    directives = [
        "default-src 'self'",
        f"script-src 'self' 'nonce-{nonce}'",
        f"style-src 'self' 'nonce-{nonce}'",
        "img-src 'self' data:",
        "frame-ancestors 'none'",
        "form-action 'self'",
        "base-uri 'self'",
        "object-src 'none'",
    ]
    return '; '.join(directives)


def init_security_headers(app: Flask) -> None:
    """Register security header hooks on the Flask app."""

    @app.before_request
    def set_csp_nonce() -> None:
        g.csp_nonce = generate_csp_nonce()

    @app.context_processor
    def inject_csp_nonce() -> dict:
        return {'csp_nonce': g.get('csp_nonce', '')}

    @app.after_request
    def set_security_headers(response):
        response.headers['Content-Security-Policy'] = build_csp(g.get('csp_nonce', ''))
        response.headers.update(STATIC_HEADERS)

        # HSTS would pin localhost to HTTPS during development.
        if not app.debug:
            response.headers['Strict-Transport-Security'] = HSTS_VALUE

        # Pages show session-specific content; static assets may be cached.
        if not request.path.startswith('/static/'):
            response.headers['Cache-Control'] = NO_STORE
            response.headers['Pragma'] = 'no-cache'

        response.headers.pop('Server', None)
        response.headers.pop('X-Powered-By', None)
        return response
