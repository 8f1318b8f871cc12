"""
apikit.tier1_runtime.handlers
─────────────────────────────
Starlette exception handlers that turn raised errors into catalog responses,
so route code can `raise NotFoundError()` instead of returning a response.

Usage (Starlette / FastAPI):
    app = Starlette(routes=routes)
    register_error_handlers(app)
"""
from __future__ import annotations

from typing import Callable

from starlette.applications import Starlette
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import Response

from apikit.tier0_core.errors import (
    ApiError,
    AuthenticationRequiredError,
    BadRequestError,
    EditConflictError,
    FailedValidationError,
    InactiveAccountError,
    InvalidAuthenticationTokenError,
    InvalidCredentialsError,
    MethodNotAllowedError,
    NotFoundError,
    RateLimitError,
)
from apikit.tier0_core.http import HTTP
from apikit.tier1_runtime.responses import (
    authentication_required_response,
    bad_request_response,
    edit_conflict_response,
    error_response,
    failed_validation_response,
    inactive_account_response,
    invalid_authentication_token_response,
    invalid_credentials_response,
    method_not_allowed_response,
    not_found_response,
    rate_limit_exceeded_response,
    server_error_response,
)

_Responder = Callable[[Request], Response]

# Errors whose catalog entry has a fixed message.
_FIXED_RESPONSES: dict[type[ApiError], _Responder] = {
    NotFoundError: not_found_response,
    MethodNotAllowedError: method_not_allowed_response,
    EditConflictError: edit_conflict_response,
    RateLimitError: rate_limit_exceeded_response,
    InvalidCredentialsError: invalid_credentials_response,
    InvalidAuthenticationTokenError: invalid_authentication_token_response,
    AuthenticationRequiredError: authentication_required_response,
    InactiveAccountError: inactive_account_response,
}


async def api_error_handler(request: Request, exc: ApiError) -> Response:
    """Return a raised ApiError as its catalog response."""
    if isinstance(exc, FailedValidationError):
        return failed_validation_response(request, exc.errors)
    if isinstance(exc, BadRequestError):
        return bad_request_response(request, exc)

    for cls in type(exc).__mro__:
        responder = _FIXED_RESPONSES.get(cls)
        if responder is not None:
            return responder(request)

    if exc.status_code >= HTTP.INTERNAL_SERVER_ERROR:
        return server_error_response(request, exc)
    return error_response(request, exc.status_code, exc.message or str(exc))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Route-level 404/405 from Starlette use the catalog; anything else keeps its detail."""
    if exc.status_code == HTTP.NOT_FOUND:
        return not_found_response(request)
    if exc.status_code == HTTP.METHOD_NOT_ALLOWED:
        return method_not_allowed_response(request)
    return error_response(request, exc.status_code, exc.detail, headers=exc.headers)


async def unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    """Anything unexpected becomes a 500 without leaking internals by default."""
    return server_error_response(request, exc)


def register_error_handlers(app: Starlette) -> None:
    """Attach all apikit error handlers to a Starlette (or FastAPI) app."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = [
    "api_error_handler",
    "http_exception_handler",
    "unhandled_exception_handler",
    "register_error_handlers",
]
