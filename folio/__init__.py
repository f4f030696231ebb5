#!/usr/bin/env python

"""
    Folio, a library management REST backend

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

__version__ = '0.1.0'
