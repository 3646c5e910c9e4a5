"""Early 400 for request bodies that claim JSON but do not parse.

FastAPI would otherwise report these as validation errors with a less
useful message. Runs inside RequestIDMiddleware, so the 400 body still
carries the request ID.
"""

import json

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import RequestResponseEndpoint

from studybuddy.errors import ApiErrorCode
from studybuddy.responses import error_response

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


async def reject_malformed_json(request: Request, call_next: RequestResponseEndpoint):
    if request.method in BODY_METHODS and "application/json" in request.headers.get(
        "content-type", ""
    ):
        body = await request.body()
        if body:
            try:
                json.loads(body)
            except ValueError:
                return JSONResponse(
                    status_code=400,
                    content=error_response(ApiErrorCode.E_INVALID_REQUEST, "Malformed JSON body"),
                )
    return await call_next(request)
