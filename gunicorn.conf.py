"""Gunicorn configuration for production deployment."""

import os

# Server socket
bind = os.environ.get('GUNICORN_BIND', '0.0.0.0:8000')

# SQLite takes one writer at a time (BEGIN IMMEDIATE); keep workers few
# and let threads queue on the write lock.
workers = int(os.environ.get('GUNICORN_WORKERS', '2'))
threads = 4
worker_class = 'gthread'

timeout = 60
graceful_timeout = 30
keepalive = 5

# Logging
accesslog = 'logs/gunicorn-access.log'
errorlog = 'logs/gunicorn-error.log'
loglevel = 'info'
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s %(D)s'

# Process naming
proc_name = 'billboard-ops'

preload_app = True

# Worker recycling
max_requests = 1000
max_requests_jitter = 50

limit_request_line = 8190
limit_request_fields = 100
limit_request_field_size = 8190
