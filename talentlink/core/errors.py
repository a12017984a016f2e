"""
Error responses.

- Request validation  -> 400 {"errors": [{"field", "message"}]}
- HTTPException       -> {"message": detail} with the exception's status
- Anything else       -> logged, 500 {"message": "Server error"}
"""

import logging
from typing import List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}
VALUE_ERROR_PREFIX = "Value error, "


def error_field(loc) -> str:
    parts = [str(part) for part in loc]
    if parts and parts[0] in LOCATION_PREFIXES:
        parts = parts[1:]
    return ".".join(parts) or "body"


def error_message(error: dict) -> str:
    """The validator's own message, without pydantic's 'Value error, ' prefix."""
    message = error.get("msg", "Invalid value")
    if message.startswith(VALUE_ERROR_PREFIX):
        message = message[len(VALUE_ERROR_PREFIX):]
    return message


def format_validation_errors(errors) -> List[dict]:
    return [
        {"field": error_field(error.get("loc", ())), "message": error_message(error)}
        for error in errors
    ]


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"errors": format_validation_errors(exc.errors())})


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None)
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Server error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
