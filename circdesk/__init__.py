#!/usr/bin/env python

"""
    circdesk, the circulation desk for a physical library:
    lending, reservations, fines and overdue sweeps.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

__version__ = '0.1.0'
