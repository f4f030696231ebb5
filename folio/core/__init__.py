#!/usr/bin/env python

"""
    Core module for Folio: datastore access, domain services and auth

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""
