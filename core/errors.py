"""
Centralized error handling for the edge server.

Error Hierarchy:
- EdgeError: expected errors whose message is safe to expose
  - ResourceNotFoundError (404): no candidate existed for the requested resource
  - MisconfigurationError (500): the deployment itself is broken (e.g. no bootstrap document)
- Anything else is an internal error; clients only ever see a generic message.

Every error body has the same shape:
    {"error": "<message>", "code": "<code>", "requestId": "<id>"}
"""
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from common.logger import setup_logger

logger = setup_logger('core.errors')


class EdgeError(Exception):
    """Base class for expected errors. Messages are safe to expose to clients."""
    status_code = 500
    code = 'edge_error'

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code


class ResourceNotFoundError(EdgeError):
    """No candidate location held the requested resource (404)."""
    status_code = 404
    code = 'not_found'


class MisconfigurationError(EdgeError):
    """Deployment is missing an artifact it must ship (500)."""
    status_code = 500
    code = 'bootstrap_missing'


def get_request_id(request: Request) -> Optional[str]:
    return getattr(request.state, 'request_id', None) or request.headers.get('x-request-id')


def error_response(request: Request, message: str, status_code: int, code: str, headers=None) -> JSONResponse:
    """Build the structured JSON error body."""
    return JSONResponse(
        {"error": message, "code": code, "requestId": get_request_id(request)},
        status_code=status_code,
        headers=headers,
    )


_HTTP_CODES = {
    404: 'not_found',
    405: 'method_not_allowed',
}


async def edge_error_handler(request: Request, exc: EdgeError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"{request.method} {request.url.path}: {exc.message} ({exc.code})")
    return error_response(request, exc.message, exc.status_code, exc.code)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404:
        message = "Not found"
    code = _HTTP_CODES.get(exc.status_code, 'http_error')
    return error_response(request, message, exc.status_code, code, headers=getattr(exc, 'headers', None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Terminal handler: never expose internal details."""
    logger.error(f"Unhandled error on {request.method} {request.url.path} "
                 f"[request_id={get_request_id(request)}]: {exc}", exc_info=exc)
    return error_response(request, "Internal server error", 500, 'internal_error')


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EdgeError, edge_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
