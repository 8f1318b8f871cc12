"""
apikit.tier0_core.http
──────────────────────
HTTP primitives: standard status codes, the single-key response envelope,
and the JSON writer every response in apikit goes through.

Wire format: a JSON object with exactly one top-level key, "data" or
"error", tab-indented, followed by one newline.
"""
from __future__ import annotations

import json
from typing import Any, Mapping, Sequence, Union

from pydantic import BaseModel
from starlette.responses import Response

from apikit.tier0_core.config import get_config

Envelope = dict[str, Any]
HeaderValues = Union[str, Sequence[str]]

JSON_CONTENT_TYPE = "application/json"


# ── Status code constants ──────────────────────────────────────────────────

class HTTP:
    """Standard HTTP status codes used across apikit."""

    # 2xx
    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NO_CONTENT = 204

    # 4xx
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    CONFLICT = 409
    UNPROCESSABLE_ENTITY = 422
    TOO_MANY_REQUESTS = 429

    # 5xx
    INTERNAL_SERVER_ERROR = 500


# ── Envelopes ──────────────────────────────────────────────────────────────

def ok(data: Any) -> Envelope:
    """Wrap a success payload: {"data": ...}."""
    return {"data": data}


def err(payload: str | Mapping[str, str]) -> Envelope:
    """Wrap an error message or field → message mapping: {"error": ...}."""
    if isinstance(payload, Mapping):
        payload = dict(payload)
    return {"error": payload}


# ── Writer ─────────────────────────────────────────────────────────────────

def _default(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    return str(obj)


def encode_envelope(data: Envelope) -> bytes:
    """
    Serialize an envelope to the wire body, trailing newline included.

    Keys keep insertion order; non-string keys are written as strings.
    NaN and infinite floats are not JSON and raise ValueError, which the
    error handlers turn into a 500.
    """
    text = json.dumps(
        data,
        indent=get_config().json_indent,
        ensure_ascii=False,
        allow_nan=False,
        default=_default,
    )
    return (text + "\n").encode("utf-8")


def write_json(
    status: int,
    data: Envelope,
    headers: Mapping[str, HeaderValues] | None = None,
) -> Response:
    """
    Build a JSON response for the envelope.

    Caller headers are applied first, then Content-Type is forced to
    application/json, so it cannot be overridden.

    Usage:
        return write_json(HTTP.OK, ok(movie), {"Location": f"/v1/movies/{movie.id}"})
    """
    response = Response(content=encode_envelope(data), status_code=status)

    for key, values in (headers or {}).items():
        if isinstance(values, str):
            values = [values]
        for value in values:
            response.headers.append(key, value)

    response.headers["content-type"] = JSON_CONTENT_TYPE
    return response


__all__ = [
    "HTTP",
    "Envelope",
    "JSON_CONTENT_TYPE",
    "ok",
    "err",
    "encode_envelope",
    "write_json",
]
