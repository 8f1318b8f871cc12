"""
apikit.tier1_runtime.responses
──────────────────────────────
Error response catalog. Each helper is a terminal response: a fixed status
and message wrapped in the {"error": ...} envelope.

    @app.route("/v1/movies/{id}")
    async def show_movie(request):
        try:
            movie_id = read_id_param(request)
        except ValueError:
            return not_found_response(request)
        ...
"""
from __future__ import annotations

from typing import Any, Mapping

from starlette.requests import Request
from starlette.responses import Response

from apikit.tier0_core.config import get_config
from apikit.tier0_core.http import HTTP, HeaderValues, err, write_json
from apikit.tier0_core.logging import get_logger, request_context

log = get_logger(__name__)

SERVER_ERROR_MESSAGE = "The server encountered a problem and could not process your request"
NOT_FOUND_MESSAGE = "The requested resource could not be found"
METHOD_NOT_ALLOWED_MESSAGE = "The {method} method is not supported for this resource"
EDIT_CONFLICT_MESSAGE = "Unable to update the record, please try again"
RATE_LIMIT_EXCEEDED_MESSAGE = "Rate limit exceeded"
INVALID_CREDENTIALS_MESSAGE = "Invalid authentication credentials"
INVALID_AUTHENTICATION_TOKEN_MESSAGE = "Invalid or missing authentication token"
AUTHENTICATION_REQUIRED_MESSAGE = "You must be authenticated to access this resource"
INACTIVE_ACCOUNT_MESSAGE = "Your user account must be activated to access this resource"


def error_response(
    request: Request,
    status: int,
    message: Any,
    headers: Mapping[str, HeaderValues] | None = None,
) -> Response:
    """Write `message` (a string or a field → message mapping) under the "error" key."""
    with request_context(request):
        log.debug("error_response", status=status)
    return write_json(status, err(message), headers)


def server_error_response(
    request: Request, exc: BaseException, include_cause: bool | None = None
) -> Response:
    """
    500 for unexpected failures. The cause is logged with its traceback and
    only shown to the client when include_cause (APIKIT_INCLUDE_ERROR_CAUSE)
    is on.
    """
    with request_context(request):
        log.error("server_error", error=str(exc), exc_info=exc)
    if include_cause is None:
        include_cause = get_config().include_error_cause

    message = SERVER_ERROR_MESSAGE
    if include_cause:
        message = f"{message}: {exc}"
    return error_response(request, HTTP.INTERNAL_SERVER_ERROR, message)


def not_found_response(request: Request) -> Response:
    return error_response(request, HTTP.NOT_FOUND, NOT_FOUND_MESSAGE)


def method_not_allowed_response(request: Request) -> Response:
    message = METHOD_NOT_ALLOWED_MESSAGE.format(method=request.method)
    return error_response(request, HTTP.METHOD_NOT_ALLOWED, message)


def bad_request_response(request: Request, exc: BaseException) -> Response:
    """400 carrying the error's own message, e.g. a RequestBodyError from read_json."""
    return error_response(request, HTTP.BAD_REQUEST, str(exc))


def failed_validation_response(request: Request, errors: Mapping[str, str]) -> Response:
    return error_response(request, HTTP.UNPROCESSABLE_ENTITY, dict(errors))


def edit_conflict_response(request: Request) -> Response:
    return error_response(request, HTTP.CONFLICT, EDIT_CONFLICT_MESSAGE)


def rate_limit_exceeded_response(request: Request) -> Response:
    return error_response(request, HTTP.TOO_MANY_REQUESTS, RATE_LIMIT_EXCEEDED_MESSAGE)


def invalid_credentials_response(request: Request) -> Response:
    return error_response(request, HTTP.UNAUTHORIZED, INVALID_CREDENTIALS_MESSAGE)


def invalid_authentication_token_response(request: Request) -> Response:
    """401 with WWW-Authenticate: Bearer, reminding clients a bearer token is expected."""
    return error_response(
        request,
        HTTP.UNAUTHORIZED,
        INVALID_AUTHENTICATION_TOKEN_MESSAGE,
        headers={"WWW-Authenticate": "Bearer"},
    )


def authentication_required_response(request: Request) -> Response:
    return error_response(request, HTTP.UNAUTHORIZED, AUTHENTICATION_REQUIRED_MESSAGE)


def inactive_account_response(request: Request) -> Response:
    return error_response(request, HTTP.FORBIDDEN, INACTIVE_ACCOUNT_MESSAGE)


__all__ = [
    "error_response",
    "server_error_response",
    "not_found_response",
    "method_not_allowed_response",
    "bad_request_response",
    "failed_validation_response",
    "edit_conflict_response",
    "rate_limit_exceeded_response",
    "invalid_credentials_response",
    "invalid_authentication_token_response",
    "authentication_required_response",
    "inactive_account_response",
]
