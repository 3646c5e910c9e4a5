"""X-Request-ID correlation and access logging.

Callers may send their own X-Request-ID. It is kept when it is a UUID
(lowercased) or a short token of letters, digits, dots, hyphens and
underscores; anything else is replaced by a fresh UUID4. The resolved ID is
stored on request.state, bound to the log context, written into error
bodies by the handlers in studybuddy.responses, and echoed on the response.

Added last by the launcher so it wraps the JSON body guard and every
exception handler.
"""

import re
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from studybuddy.logging import clear_request_context, get_logger, set_request_context

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128

TOKEN_PATTERN = re.compile(r"[A-Za-z0-9._-]+")

logger = get_logger(__name__)


def _as_uuid(value: str) -> uuid.UUID | None:
    # Only the hyphenated 36-char form; uuid.UUID alone also takes braces and urn: prefixes
    if len(value) != 36:
        return None
    try:
        parsed = uuid.UUID(value)
    except ValueError:
        return None
    return parsed if str(parsed) == value.lower() else None


def is_valid_request_id(value: str) -> bool:
    """Whether a caller-supplied ID may be used as is (after normalizing)."""
    if not value or len(value.encode("utf-8")) > MAX_REQUEST_ID_LENGTH:
        return False
    return _as_uuid(value) is not None or TOKEN_PATTERN.fullmatch(value) is not None


def normalize_request_id(value: str) -> str:
    """Lowercase UUIDs; leave other valid tokens untouched."""
    parsed = _as_uuid(value)
    return str(parsed) if parsed is not None else value


def resolve_request_id(header_value: str | None) -> str:
    """Request ID to use for a request given its X-Request-ID header."""
    if header_value and is_valid_request_id(header_value):
        return normalize_request_id(header_value)
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Resolves the request ID, binds log context and writes the access log.

    Args:
        app: The ASGI application.
        log_requests: Emit one request_completed entry per request.
    """

    def __init__(self, app, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.monotonic()
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        set_request_context(request_id, path=request.url.path, method=request.method)

        try:
            response = await call_next(request)
        except Exception:
            # unhandled_exception_handler renders the 500 body
            logger.exception("request_failed")
            raise
        else:
            response.headers[REQUEST_ID_HEADER] = request_id
            if self.log_requests:
                log = logger.warning if response.status_code >= 500 else logger.info
                log(
                    "request_completed",
                    status_code=response.status_code,
                    duration_ms=round((time.monotonic() - started) * 1000, 2),
                )
            return response
        finally:
            clear_request_context()
