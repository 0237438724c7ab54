"""
Gunicorn configuration for production deployment.

Usage:
    gunicorn -c gunicorn.conf.py wsgi:app
"""

import multiprocessing
import os

# --- Bind ---
bind = os.environ.get('GUNICORN_BIND', f"0.0.0.0:{os.environ.get('PORT', '4000')}")

# --- Workers ---
# Threads let one worker overlap requests that wait on MySQL or bcrypt.
# The per-IP rate limit is only global if every worker shares its counters:
# with the default in-process storage there is exactly one worker.
_ratelimit_storage = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
if _ratelimit_storage.startswith('memory://'):
    workers = 1
else:
    workers = int(os.environ.get('GUNICORN_WORKERS', min(multiprocessing.cpu_count() * 2 + 1, 4)))
worker_class = 'gthread'
threads = int(os.environ.get('GUNICORN_THREADS', '4'))

# --- Timeouts ---
timeout = 30
graceful_timeout = 10
keepalive = 2

# --- Worker Recycling ---
max_requests = 1000
max_requests_jitter = 50

# --- Request Limits ---
# Matches Flask's MAX_CONTENT_LENGTH intent: small form posts only.
limit_request_line = 8190
limit_request_fields = 50
limit_request_field_size = 8190

# --- Logging ---
# Access log excludes request bodies, cookies and authorization headers.
accesslog = '-'
errorlog = '-'
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" %(L)s'
loglevel = os.environ.get('LOG_LEVEL', 'info')

proc_name = 'favlinks'

# --- Forwarded Headers ---
# Only trust X-Forwarded-* from the reverse proxy; the rate limiter keys on client IP.
forwarded_allow_ips = os.environ.get('FORWARDED_ALLOW_IPS', '127.0.0.1')


def worker_exit(server, worker):
    """Release pooled database connections when a worker stops."""
    app = getattr(worker, 'wsgi', None)
    pool = getattr(app, 'extensions', {}).get('pool') if app is not None else None
    if pool is not None:
        pool.dispose()
