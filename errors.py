"""HTTP error types raised by services and rendered by the app error handler."""

from __future__ import annotations

from werkzeug.exceptions import (
    BadRequest,
    Conflict,
    Forbidden as _Forbidden,
    NotFound as _NotFound,
    Unauthorized,
)


class ServiceError:
    """Mixin for errors that carry extra fields for the JSON error body."""

    details: str | None = None

    def extra_payload(self) -> dict:
        return {"details": self.details} if self.details else {}


class Unauthenticated(ServiceError, Unauthorized):
    """No valid session was presented."""

    description = "Authentication required."


class Forbidden(ServiceError, _Forbidden):
    """The caller is authenticated but lacks the required capability."""

    description = "Admin privileges required."


class InvalidInput(ServiceError, BadRequest):
    """A required field is missing or a value is malformed."""

    def __init__(self, description: str | None = None, details: str | None = None):
        super().__init__(description)
        self.details = details


class NotFound(ServiceError, _NotFound):
    """A referenced record does not exist."""


class DuplicateRequest(ServiceError, BadRequest):
    """The user already owns an active verification request."""

    description = "You already have a verification request."

    def __init__(self, status: str):
        super().__init__()
        self.status = status

    def extra_payload(self) -> dict:
        return {"status": self.status}


class InvalidTransition(ServiceError, Conflict):
    """A review targeted a request that is no longer pending."""

    def __init__(self, status: str):
        super().__init__(f"Verification request has already been {status}.")
        self.status = status

    def extra_payload(self) -> dict:
        return {"status": self.status}


__all__ = [
    "ServiceError",
    "Unauthenticated",
    "Forbidden",
    "InvalidInput",
    "NotFound",
    "DuplicateRequest",
    "InvalidTransition",
]
