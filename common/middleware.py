import time
import uuid
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from core.errors import unhandled_exception_handler
from core.routing import API_PREFIX, claimed_route
from common.logger import setup_logger

logger = setup_logger('common.middleware')

REQUEST_ID_HEADER = 'X-Request-ID'
QUIET_PATHS = {API_PREFIX + '/health'}


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request id before routing and write one access line per request."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as exc:
            # Converted here so the 500 still carries the id and gets an access line
            response = await unhandled_exception_handler(request, exc)

        response.headers[REQUEST_ID_HEADER] = request_id
        duration_ms = (time.time() - start_time) * 1000

        log_level = logging.WARNING if response.status_code >= 400 else logging.INFO
        if request.url.path in QUIET_PATHS:
            log_level = logging.DEBUG
        logger.log(
            log_level,
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"[{claimed_route(request.scope).value}] ({duration_ms:.1f}ms) request_id={request_id}"
        )
        return response
