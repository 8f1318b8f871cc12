"""
apikit
──────
Stable top-level exports. Import from here, not from sub-modules directly.
Every name exported here is part of the public API and subject to semver.
"""
from apikit.tier0_core.config import get_config, ApiKitConfig
from apikit.tier0_core.logging import configure_logging, get_logger, request_context
from apikit.tier0_core.errors import (
    ApiError,
    BadRequestError,
    RequestBodyError,
    NotFoundError,
    MethodNotAllowedError,
    FailedValidationError,
    EditConflictError,
    RateLimitError,
    InvalidCredentialsError,
    InvalidAuthenticationTokenError,
    AuthenticationRequiredError,
    InactiveAccountError,
    InvalidDestinationError,
)
from apikit.tier0_core.http import HTTP, Envelope, ok, err, write_json
from apikit.tier0_core.ids import generate_unique_id

from apikit.tier1_runtime.validate import (
    Validator,
    EMAIL_RX,
    permitted_value,
    matches,
    unique,
)
from apikit.tier1_runtime.request import (
    StrictModel,
    read_json,
    decode_json_body,
    read_id_param,
    read_string,
    read_csv,
    read_int,
)
from apikit.tier1_runtime.responses import (
    error_response,
    server_error_response,
    not_found_response,
    method_not_allowed_response,
    bad_request_response,
    failed_validation_response,
    edit_conflict_response,
    rate_limit_exceeded_response,
    invalid_credentials_response,
    invalid_authentication_token_response,
    authentication_required_response,
    inactive_account_response,
)
from apikit.tier1_runtime.handlers import register_error_handlers
from apikit.tier1_runtime.background import BackgroundGroup, run_in_background

__version__ = "0.1.0"
__all__ = [
    # config
    "get_config", "ApiKitConfig",
    # logging
    "configure_logging", "get_logger", "request_context",
    # errors
    "ApiError", "BadRequestError", "RequestBodyError", "NotFoundError",
    "MethodNotAllowedError", "FailedValidationError", "EditConflictError",
    "RateLimitError", "InvalidCredentialsError", "InvalidAuthenticationTokenError",
    "AuthenticationRequiredError", "InactiveAccountError", "InvalidDestinationError",
    # http
    "HTTP", "Envelope", "ok", "err", "write_json",
    # ids
    "generate_unique_id",
    # validate
    "Validator", "EMAIL_RX", "permitted_value", "matches", "unique",
    # request
    "StrictModel", "read_json", "decode_json_body",
    "read_id_param", "read_string", "read_csv", "read_int",
    # responses
    "error_response", "server_error_response", "not_found_response",
    "method_not_allowed_response", "bad_request_response",
    "failed_validation_response", "edit_conflict_response",
    "rate_limit_exceeded_response", "invalid_credentials_response",
    "invalid_authentication_token_response", "authentication_required_response",
    "inactive_account_response",
    # handlers
    "register_error_handlers",
    # background
    "BackgroundGroup", "run_in_background",
]
