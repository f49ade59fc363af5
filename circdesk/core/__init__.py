#!/usr/bin/env python

"""
    Core module for circdesk, the lending lifecycle engine

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from circdesk.core.db import Store
from circdesk.core.api import CirculationAPI

__all__ = ["Store", "CirculationAPI"]
