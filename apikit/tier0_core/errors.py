"""
apikit.tier0_core.errors
────────────────────────
Standard error taxonomy. Every ApiError maps 1:1 onto an entry of the error
response catalog (apikit.tier1_runtime.responses), so a handler can raise
instead of building the response itself.

Programmer errors (InvalidDestinationError) are deliberately not ApiErrors:
they must crash loudly instead of turning into a 4xx.
"""
from __future__ import annotations

from typing import Any, Mapping


# ── Base error ────────────────────────────────────────────────────────────────

class ApiError(Exception):
    """
    Base class for all expected API failures. Every error has:
    - status_code: HTTP status code of the response it becomes
    - message: client-visible text, or None to use the catalog default
    - metadata: internal context for logs, never sent to clients
    """

    status_code: int = 500

    def __init__(self, message: str | None = None, **metadata: Any) -> None:
        self.message = message
        self.metadata = metadata
        super().__init__(message or self.__class__.__name__)


# ── Typed error classes ───────────────────────────────────────────────────────

class BadRequestError(ApiError):
    """The request could not be understood; the message is shown verbatim."""
    status_code = 400


class RequestBodyError(BadRequestError):
    """A JSON request body failed to decode. Produced by read_json."""

    def __init__(self, message: str, **metadata: Any) -> None:
        super().__init__(message, **metadata)


class NotFoundError(ApiError):
    status_code = 404


class MethodNotAllowedError(ApiError):
    status_code = 405


class FailedValidationError(ApiError):
    """Field-level validation failure; carries the field → message mapping."""
    status_code = 422

    def __init__(self, errors: Mapping[str, str], **metadata: Any) -> None:
        self.errors = dict(errors)
        super().__init__("validation failed", **metadata)


class EditConflictError(ApiError):
    """Concurrent update detected; the client should retry."""
    status_code = 409


class RateLimitError(ApiError):
    status_code = 429


class InvalidCredentialsError(ApiError):
    status_code = 401


class InvalidAuthenticationTokenError(ApiError):
    """Bearer token missing or rejected. The response carries a challenge."""
    status_code = 401


class AuthenticationRequiredError(ApiError):
    status_code = 401


class InactiveAccountError(ApiError):
    status_code = 403


# ── Programmer errors ─────────────────────────────────────────────────────────

class InvalidDestinationError(TypeError):
    """
    Raised when a body is decoded into something that is not a model class.
    No client input can trigger this, so it is never mapped to a response.
    """


__all__ = [
    "ApiError",
    "BadRequestError",
    "RequestBodyError",
    "NotFoundError",
    "MethodNotAllowedError",
    "FailedValidationError",
    "EditConflictError",
    "RateLimitError",
    "InvalidCredentialsError",
    "InvalidAuthenticationTokenError",
    "AuthenticationRequiredError",
    "InactiveAccountError",
    "InvalidDestinationError",
]
