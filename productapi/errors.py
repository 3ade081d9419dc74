# productapi/errors.py
from typing import List, Optional


class APIError(Exception):
    """Base class for errors that map onto an HTTP status and JSON envelope."""

    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, details: Optional[List[str]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self):
        body = {"success": False, "error": self.message}
        if self.details:
            body["details"] = list(self.details)
        return body


class NotFoundError(APIError):
    status_code = 404
    default_message = "Not found"


class ValidationFailedError(APIError):
    status_code = 400
    default_message = "Validation failed"


class UnauthorizedError(APIError):
    status_code = 401
    default_message = "Unauthorized: Invalid or missing API key"


class InternalError(APIError):
    status_code = 500
    default_message = "Internal Server Error"
