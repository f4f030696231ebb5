#!/usr/bin/env python

"""
    Error translation for Folio.

    Services raise `FolioAPIError` subclasses; the handlers below turn
    those, request validation failures and anything unexpected into the
    one JSON error body every endpoint shares.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
from datetime import datetime, timezone
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from folio.core.exceptions import FolioAPIError
from folio.schemas.base import ErrorResponse

logger = logging.getLogger(__name__)

_LOCATIONS = {'body', 'query', 'path', 'header', 'cookie'}


def error_body(status_code: int, message: str, field_errors=None) -> dict:
    return ErrorResponse(
        status=status_code,
        message=message,
        field_errors=field_errors,
        timestamp=datetime.now(timezone.utc),
    ).model_dump(mode='json', by_alias=True)


def _field_errors(errors) -> dict:
    fields = {}
    for error in errors:
        loc = [str(part) for part in error.get('loc', ()) if part not in _LOCATIONS]
        fields.setdefault('.'.join(loc) or 'body', error.get('msg', 'Invalid value'))
    return fields


async def folio_error_handler(request: Request, exc: FolioAPIError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.message),
        headers=headers,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    field_errors = _field_errors(exc.errors())
    logger.warning(f"{request.method} {request.url.path} rejected: {field_errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(status.HTTP_400_BAD_REQUEST, "Validation failed", field_errors),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, str(exc.detail)),
        headers=getattr(exc, 'headers', None),
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, FolioAPIError.message),
    )


def register_handlers(app: FastAPI):
    app.add_exception_handler(FolioAPIError, folio_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
