"""
Map domain errors to API responses.

Internal failures are logged with their full cause chain, the operation that
raised them and the request id; the client only ever sees a generic message.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shortlink_app.exceptions import (
    AliasExistsError,
    RandomSourceUnavailableError,
    ShortenerError,
    StorageError,
    URLNotFoundError,
)
from shortlink_app.schemas import response as resp

logger = logging.getLogger(__name__)

MSG_ALIAS_EXISTS = "url already exists"
MSG_NOT_FOUND = "url not found"
MSG_INTERNAL = "internal server error"
MSG_DECODE_FAILED = "failed to decode request"


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=resp.error(message).model_dump(exclude_none=True),
    )


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or "-"


async def alias_exists_handler(request: Request, exc: AliasExistsError) -> JSONResponse:
    logger.info(
        MSG_ALIAS_EXISTS,
        extra={"op": exc.op, "alias": exc.alias, "request_id": _request_id(request)},
    )
    return error_response(status.HTTP_409_CONFLICT, MSG_ALIAS_EXISTS)


async def not_found_handler(request: Request, exc: URLNotFoundError) -> JSONResponse:
    logger.info(
        MSG_NOT_FOUND,
        extra={"op": exc.op, "alias": exc.alias, "request_id": _request_id(request)},
    )
    return error_response(status.HTTP_404_NOT_FOUND, MSG_NOT_FOUND)


async def internal_error_handler(request: Request, exc: ShortenerError) -> JSONResponse:
    logger.error(
        "request failed: %s",
        exc,
        exc_info=exc,
        extra={"op": exc.op, "request_id": _request_id(request)},
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, MSG_INTERNAL)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    logger.info(
        "invalid request",
        extra={"errors": errors, "request_id": _request_id(request)},
    )

    if any(err.get("type") == "json_invalid" for err in errors):
        body = resp.error(MSG_DECODE_FAILED)
    else:
        body = resp.validation_error(errors)

    return JSONResponse(
        status_code=422,
        content=body.model_dump(exclude_none=True),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AliasExistsError, alias_exists_handler)
    app.add_exception_handler(URLNotFoundError, not_found_handler)
    app.add_exception_handler(StorageError, internal_error_handler)
    app.add_exception_handler(RandomSourceUnavailableError, internal_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
