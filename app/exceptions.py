"""
Domain errors raised by services and rendered by the app's exception handlers

Every error renders as {"error": message}; invalid sessions additionally carry
"invalidSession": true so the reader can drop its local session.
"""
from typing import Any, Dict


class JournalError(Exception):
    """Base class for errors that map onto an HTTP status"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationError(JournalError):
    """Malformed or inconsistent input, rejected before any write"""

    status_code = 400


class NotFoundError(JournalError):
    """Referenced chapter, section, page or user does not exist"""

    status_code = 404


class ConflictError(JournalError):
    """Write would violate a uniqueness rule that cannot be resolved by upsert"""

    status_code = 409


class InvalidSessionError(JournalError):
    """The user behind the request no longer exists"""

    status_code = 401

    def __init__(self, message: str = "Your session has expired. Please log in again."):
        super().__init__(message)

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message, "invalidSession": True}


class ContentWriteError(JournalError):
    """A multi-row content write failed and was rolled back"""

    status_code = 500
