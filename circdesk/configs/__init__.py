#!/usr/bin/env python

"""
    Configurations for circdesk

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import os


# Determine environment
TESTING = os.getenv("TESTING", "false").lower() == "true"

# API server configuration
HOST = os.environ.get('CIRCDESK_HOST', 'localhost')
PORT = int(os.environ.get('CIRCDESK_PORT', 8080))
WORKERS = int(os.environ.get('CIRCDESK_WORKERS', 1))
DEBUG = bool(int(os.environ.get('CIRCDESK_DEBUG', 0)))
LOG_LEVEL = os.environ.get('CIRCDESK_LOG_LEVEL', 'info')

OPTIONS = {
    'host': HOST,
    'port': PORT,
    'log_level': LOG_LEVEL,
    'reload': DEBUG,
    'workers': WORKERS,
}

# Database configuration
DB_URI = (
    "sqlite:///:memory:" if TESTING else
    os.environ.get('CIRCDESK_DB_URI', 'sqlite:///circdesk.db')
)

# Lending policy fallbacks; fine_rate in system_config takes precedence
DEFAULT_FINE_RATE = float(os.environ.get('CIRCDESK_DEFAULT_FINE_RATE', '0.5'))
RESERVATION_DAYS = int(os.environ.get('CIRCDESK_RESERVATION_DAYS', 30))
SWEEP_ON_STARTUP = bool(int(os.environ.get('CIRCDESK_SWEEP_ON_STARTUP', 1)))

__all__ = [
    'HOST', 'PORT', 'DEBUG', 'LOG_LEVEL', 'OPTIONS', 'DB_URI', 'TESTING',
    'DEFAULT_FINE_RATE', 'RESERVATION_DAYS', 'SWEEP_ON_STARTUP',
]
