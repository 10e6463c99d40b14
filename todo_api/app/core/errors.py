"""
Error taxonomy and HTTP mapping.

Services raise the exceptions defined here instead of building
responses themselves.  ``register_exception_handlers`` installs
FastAPI handlers that translate each exception class into its status
code and body:

* ``ValidationError`` and ``PersistenceError`` -> 400 ``{"error": detail}``
* ``AuthError`` -> 401 with an empty object
* ``NotFoundError`` -> 404 with an empty object

Not-found and not-owned records share the same 404 body so callers
cannot discover the existence of other users' documents.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that terminate a request."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: Any = None) -> None:
        super().__init__(detail)
        self.detail = detail

    def body(self) -> dict:
        return {"error": self.detail}


class ValidationError(ApiError):
    """Malformed input: bad id format, weak password, invalid body."""


class PersistenceError(ApiError):
    """Datastore-level failure such as a uniqueness violation."""


class AuthError(ApiError):
    """Missing, invalid or revoked token."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def body(self) -> dict:
        return {}


class NotFoundError(ApiError):
    """No record matches the reference within the caller's scope."""

    status_code = status.HTTP_404_NOT_FOUND

    def body(self) -> dict:
        return {}


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    logger.debug("%s %s -> %s", request.method, request.url.path, exc.status_code)
    return JSONResponse(status_code=exc.status_code, content=exc.body())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Body validation failures are client errors, reported as 400 rather
    # than FastAPI's default 422.
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": jsonable_encoder(exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error handlers to ``app``."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
