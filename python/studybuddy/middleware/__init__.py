"""HTTP middleware for the StudyBuddy API."""

from studybuddy.middleware.json_body import reject_malformed_json
from studybuddy.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware

__all__ = ["RequestIDMiddleware", "REQUEST_ID_HEADER", "reject_malformed_json"]
