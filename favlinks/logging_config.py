"""
Structured JSON logging for security and database events.

Two loggers are configured:
- ``security.audit``: register/login/logout outcomes, CSRF and rate-limit hits.
- ``favlinks.db``: pool handshake results and categorized storage failures.

NEVER logs: passwords, password hashes, session tokens, or request bodies.
"""

import json
import logging
import re
import time
from typing import Any, Dict

AUDIT_LOGGER = 'security.audit'
DB_LOGGER = 'favlinks.db'

# Control characters that could forge extra log lines.
_LOG_INJECTION_PATTERN = re.compile(r'[\x00-\x08\x0a-\x1f\x7f]')

_CONTEXT_FIELDS = (
    'ip', 'username', 'user_agent', 'request_id', 'reason',
    'category', 'code', 'link_id',
)


def sanitize_log_value(value: str, max_length: int = 256) -> str:
    """Strip control characters and truncate a value before logging it."""
    cleaned = _LOG_INJECTION_PATTERN.sub('', str(value))
    return cleaned[:max_length]


class AuditFormatter(logging.Formatter):
    """JSON formatter; one object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            'timestamp': time.strftime('%Y-%m-%dT%H:%M:%S%z', time.gmtime(record.created)),
            'level': record.levelname,
            'logger': record.name,
            'event': getattr(record, 'event', 'unknown'),
            'message': record.getMessage(),
        }

        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = sanitize_log_value(str(value))

        if record.exc_info and record.levelno >= logging.ERROR:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def setup_logging(app) -> None:
    """
    Attach the JSON handler to the audit and database loggers.

    Safe to call once per app instance; handlers are only added the first time.
    """
    level = logging.DEBUG if app.debug else logging.INFO
    formatter = AuditFormatter()

    for name in (AUDIT_LOGGER, DB_LOGGER):
        logger = logging.getLogger(name)
        logger.setLevel(level)
        if logger.handlers:  # Repeated create_app() calls in tests
            continue
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        logger.addHandler(handler)


def audit_log(event: str, message: str, level: int = logging.INFO, **context) -> None:
    """
    Log a security audit event.

    Args:
        event: Event type (e.g. 'login_success', 'register_failed')
        message: Human-readable description
        level: Logging level, INFO unless the event signals an attack
        **context: Extra fields (ip, username, user_agent, request_id, reason)
    """
    extra = {'event': event}
    extra.update(context)
    logging.getLogger(AUDIT_LOGGER).log(level, message, extra=extra)
