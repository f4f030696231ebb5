#!/usr/bin/env python

"""
    Configurations for Folio

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import os


# Determine environment
TESTING = os.getenv("TESTING", "false").lower() == "true"

# API server configuration
SCHEME = 'http'
HOST = os.environ.get('FOLIO_HOST', 'localhost')
PORT = int(os.environ.get('FOLIO_PORT', 8080))
WORKERS = int(os.environ.get('FOLIO_WORKERS', 1))
DEBUG = bool(int(os.environ.get('FOLIO_DEBUG', 0)))
LOG_LEVEL = os.environ.get('FOLIO_LOG_LEVEL', 'info')
SSL_CRT = os.environ.get('FOLIO_SSL_CRT')
SSL_KEY = os.environ.get('FOLIO_SSL_KEY')
CORS_ORIGINS = [
    origin.strip() for origin in
    os.environ.get('FOLIO_CORS_ORIGINS', 'http://localhost:3000').split(',')
    if origin.strip()
]

OPTIONS = {
    'host': HOST,
    'port': PORT,
    'log_level': LOG_LEVEL,
    'reload': DEBUG,
    'workers': WORKERS,
}
if SSL_CRT and SSL_KEY:
    OPTIONS['ssl_keyfile'] = SSL_KEY
    OPTIONS['ssl_certfile'] = SSL_CRT
    SCHEME = 'https'

DB_CONFIG = {
    'user': os.environ.get('DB_USER', 'postgres'),
    'password': os.environ.get('DB_PASSWORD'),
    'host': os.environ.get('DB_HOST', 'localhost'),
    'port': int(os.environ.get('DB_PORT', '5432')),
    'dbname': os.environ.get('DB_NAME', 'folio'),
}

# Database configuration
DB_URI = (
    "sqlite:///:memory:" if TESTING else
    os.environ.get('FOLIO_DB_URI') or
    'postgresql+psycopg2://{user}:{password}@{host}:{port}/{dbname}'.format(**DB_CONFIG)
)

# Seconds a single request may wait on the datastore (pool checkout,
# statement execution, row locks) before failing as a transient error.
REQUEST_TIMEOUT = float(os.environ.get('FOLIO_REQUEST_TIMEOUT', 10))

# Token signing
SECRET_KEY = os.environ.get('FOLIO_SECRET_KEY') or (
    'folio-testing-secret-key-do-not-use-in-production' if TESTING else None
)
TOKEN_TTL_MINUTES = int(os.environ.get('FOLIO_TOKEN_TTL_MINUTES', 60 * 24))
TOKEN_ISSUER = 'folio'

# Collections
BULK_LIMIT = int(os.environ.get('FOLIO_BULK_LIMIT', 100))
DEFAULT_PAGE_SIZE = int(os.environ.get('FOLIO_DEFAULT_PAGE_SIZE', 10))
MAX_PAGE_SIZE = int(os.environ.get('FOLIO_MAX_PAGE_SIZE', 100))

__all__ = [
    'SCHEME', 'HOST', 'PORT', 'DEBUG', 'LOG_LEVEL', 'OPTIONS', 'CORS_ORIGINS',
    'DB_URI', 'DB_CONFIG', 'TESTING', 'REQUEST_TIMEOUT', 'SECRET_KEY',
    'TOKEN_TTL_MINUTES', 'TOKEN_ISSUER', 'BULK_LIMIT', 'DEFAULT_PAGE_SIZE',
    'MAX_PAGE_SIZE',
]
