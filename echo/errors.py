"""Error taxonomy and the handlers that render it as a JSON:API error document."""
import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from echo.schemas import ErrorDocument, ErrorObject

logger = logging.getLogger(__name__)

JSON_API_MEDIA_TYPE = "application/vnd.api+json"

INTERNAL_ERROR_DETAIL = "Something went horribly wrong :("


class JSONAPIResponse(JSONResponse):
    media_type = JSON_API_MEDIA_TYPE


class EchoError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(EchoError):
    """Malformed or out-of-range request body."""
    status_code = 400


class NotFoundError(EchoError):
    status_code = 404


class ConflictError(EchoError):
    """An endpoint with the same verb and path is already registered."""
    status_code = 409


class StorageError(EchoError):
    """Underlying persistence failure. Never shown to the client."""
    status_code = 500


def error_response(status_code: int, detail: str) -> JSONAPIResponse:
    return JSONAPIResponse(
        status_code=status_code,
        content=ErrorDocument(errors=[ErrorObject(code=HTTPStatus(status_code).phrase, detail=detail)]).model_dump(),
    )


async def handle_echo_error(request: Request, exc: EchoError) -> JSONAPIResponse:
    if exc.status_code >= 500:
        logger.error(f"internal error on {request.method} {request.url.path}: {exc.detail}")
        return error_response(exc.status_code, INTERNAL_ERROR_DETAIL)
    return error_response(exc.status_code, exc.detail)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONAPIResponse:
    # Routing failures, e.g. a method outside the supported verbs
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONAPIResponse:
    logger.exception(f"unhandled error on {request.method} {request.url.path}: {exc}")
    return error_response(500, INTERNAL_ERROR_DETAIL)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EchoError, handle_echo_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)
