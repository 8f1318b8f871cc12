"""
apikit.tier1_runtime.request
────────────────────────────
Strict JSON request bodies and query/path parameter readers.

read_json decodes exactly one JSON value into a Pydantic model. Bodies are
capped at APIKIT_MAX_BODY_BYTES, unknown keys are rejected, JSON kinds must
match the model's field types, and trailing data after the first value is an
error. Every caller-input failure is a RequestBodyError whose message is safe
to send to the client as-is:

    body contains badly-formed JSON (at character 12)
    body contains badly-formed JSON
    body contains incorrect JSON type for field "year"
    body contains incorrect JSON type (at character 7)
    body must not be empty
    body contains unknown key "oddKey"
    body must not be larger than 1048576 bytes
    body must only contain a single JSON value

Passing something other than a model class raises InvalidDestinationError,
which is a bug in the caller and is never turned into a 400.
"""
from __future__ import annotations

import json
import re
import types
from copy import copy
from functools import lru_cache
from typing import (
    Annotated,
    Any,
    AsyncIterator,
    Iterable,
    Mapping,
    Sequence,
    TypeVar,
    Union,
    get_args,
    get_origin,
)

from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError, create_model
from starlette.requests import Request

from apikit.tier0_core.config import get_config
from apikit.tier0_core.errors import InvalidDestinationError, RequestBodyError
from apikit.tier0_core.logging import get_logger, request_context
from apikit.tier1_runtime.validate import Validator

M = TypeVar("M", bound=BaseModel)

log = get_logger(__name__)

_WHITESPACE = " \t\n\r"
_INTEGER_RX = re.compile(r"[+-]?[0-9]+")
_INT64_MAX = 2**63 - 1

# strings are matched whole so constants inside them are skipped
_CONSTANT_RX = re.compile(r'"(?:[^"\\]|\\.)*"|(NaN|Infinity)')

# pydantic error types that mean "wrong JSON kind for this field"
_KIND_ERRORS = frozenset({"int_from_float", "none_required", "finite_number"})

_CLOSED_CONFIG = ConfigDict(extra="forbid", allow_inf_nan=False)


class _NonFiniteConstant(ValueError):
    pass


def _reject_constant(name: str) -> Any:
    raise _NonFiniteConstant(name)


_DECODER = json.JSONDecoder(parse_constant=_reject_constant)


class StrictModel(BaseModel):
    """Base for request models that reject unknown keys even outside read_json."""

    model_config = _CLOSED_CONFIG


# ── Body decoding ──────────────────────────────────────────────────────────

async def read_json(request: Request, model: type[M], *, max_bytes: int | None = None) -> M:
    """
    Read the request body and decode it into `model`.

    Usage:
        class CreateMovie(BaseModel):
            title: str
            year: int

        try:
            payload = await read_json(request, CreateMovie)
        except RequestBodyError as exc:
            return bad_request_response(request, exc)
    """
    closed = _closed_model(model)
    limit = _limit(max_bytes)
    raw, exceeded = await _read_limited_async(request.stream(), limit)
    with request_context(request):
        return _decode(raw, exceeded, limit, closed)


def decode_json_body(
    body: bytes | Iterable[bytes], model: type[M], *, max_bytes: int | None = None
) -> M:
    """Synchronous read_json for raw bytes or an iterable of byte chunks (WSGI bodies)."""
    closed = _closed_model(model)
    limit = _limit(max_bytes)
    chunks = [body] if isinstance(body, (bytes, bytearray)) else body
    raw, exceeded = _read_limited(chunks, limit)
    return _decode(raw, exceeded, limit, closed)


def _limit(max_bytes: int | None) -> int:
    limit = get_config().max_body_bytes if max_bytes is None else max_bytes
    if limit <= 0:
        raise ValueError(f"max_bytes must be positive, got {limit}")
    return limit


def _read_limited(chunks: Iterable[bytes], limit: int) -> tuple[bytes, bool]:
    buf = bytearray()
    for chunk in chunks:
        if len(buf) + len(chunk) > limit:
            buf.extend(chunk[: limit - len(buf)])
            return bytes(buf), True
        buf.extend(chunk)
    return bytes(buf), False


async def _read_limited_async(chunks: AsyncIterator[bytes], limit: int) -> tuple[bytes, bool]:
    buf = bytearray()
    async for chunk in chunks:
        if len(buf) + len(chunk) > limit:
            buf.extend(chunk[: limit - len(buf)])
            return bytes(buf), True
        buf.extend(chunk)
    return bytes(buf), False


def _closed_model(model: Any) -> type[BaseModel]:
    """Return `model`, or a subclass of it that forbids unknown keys at every depth."""
    if not (isinstance(model, type) and issubclass(model, BaseModel)):
        raise InvalidDestinationError(
            f"read_json destination must be a pydantic model class, got {model!r}"
        )
    return _forbidding_subclass(model)


# models whose closed variant is being built; self-references resolve to the original
_building: set[type[BaseModel]] = set()


@lru_cache(maxsize=None)
def _forbidding_subclass(model: type[BaseModel]) -> type[BaseModel]:
    _building.add(model)
    try:
        overrides = {}
        for name, field in model.model_fields.items():
            annotation = _close_annotation(field.annotation)
            if annotation is not field.annotation:
                overrides[name] = (annotation, copy(field))
    finally:
        _building.discard(model)

    config = model.model_config
    if not overrides and config.get("extra") == "forbid" and config.get("allow_inf_nan") is False:
        return model

    closed = type(
        model.__name__,
        (model,),
        {
            "__module__": model.__module__,
            "__qualname__": model.__qualname__,
            "model_config": _CLOSED_CONFIG,
        },
    )
    if overrides:
        closed = create_model(model.__name__, __base__=closed, __module__=model.__module__, **overrides)
    return closed


def _close_annotation(annotation: Any) -> Any:
    """Swap every model inside `annotation` (list[...], X | None, ...) for its closed variant."""
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        if annotation in _building:
            return annotation
        return _forbidding_subclass(annotation)

    args = get_args(annotation)
    if not args:
        return annotation
    closed = tuple(_close_annotation(arg) for arg in args)
    if all(new is old for new, old in zip(closed, args)):
        return annotation

    origin = get_origin(annotation)
    if origin is Annotated:
        return Annotated[(closed[0], *annotation.__metadata__)]
    if origin is Union or origin is types.UnionType:
        return Union[closed]
    return origin[closed]


def _reject(message: str, model: type[BaseModel]) -> RequestBodyError:
    log.debug("request_body_rejected", model=model.__name__, reason=message)
    return RequestBodyError(message)


def _decode(raw: bytes, exceeded: bool, limit: int, model: type[M]) -> M:
    too_large = f"body must not be larger than {limit} bytes"
    text = raw.decode("utf-8", errors="replace")

    start = len(text) - len(text.lstrip(_WHITESPACE))
    if start == len(text):
        if exceeded:
            raise _reject(too_large, model)
        raise _reject("body must not be empty", model)

    try:
        _, end = _DECODER.raw_decode(text, start)
    except _NonFiniteConstant as exc:
        offset = _byte_offset(text, _constant_position(text, start)) + 1
        raise _reject(f"body contains badly-formed JSON (at character {offset})", model) from exc
    except json.JSONDecodeError as exc:
        if _is_truncated(exc, text):
            if exceeded:
                raise _reject(too_large, model) from exc
            raise _reject("body contains badly-formed JSON", model) from exc
        offset = _byte_offset(text, exc.pos) + 1
        raise _reject(f"body contains badly-formed JSON (at character {offset})", model) from exc

    # an array is refused on its opening bracket, any other value once it is read
    if text[start] == "[":
        type_offset = _byte_offset(text, start) + 1
    else:
        type_offset = _byte_offset(text, end)
    instance = _validate(model, text[start:end], type_offset)

    if exceeded or text[end:].strip(_WHITESPACE):
        raise _reject("body must only contain a single JSON value", model)

    return instance


def _is_truncated(exc: json.JSONDecodeError, text: str) -> bool:
    """True when the decoder ran off the end of the body mid-value."""
    if exc.pos >= len(text):
        return True
    if exc.msg.startswith("Unterminated string"):
        return True
    tail = text[exc.pos:]
    if exc.msg.startswith("Invalid \\uXXXX escape"):
        return len(tail) < 6
    if exc.msg == "Expecting value":
        return tail == "-" or any(lit.startswith(tail) for lit in ("true", "false", "null"))
    return False


def _byte_offset(text: str, pos: int) -> int:
    """Number of UTF-8 bytes before character `pos`."""
    return len(text[:pos].encode("utf-8"))


def _constant_position(text: str, start: int) -> int:
    """Position of the first character that makes a NaN/Infinity literal invalid."""
    for match in _CONSTANT_RX.finditer(text, start):
        if match.group(1):
            return match.start(1)
    return start


def _validate(model: type[M], fragment: str, type_offset: int) -> M:
    try:
        return model.model_validate_json(fragment, strict=True)
    except PydanticValidationError as exc:
        raise _reject(_describe(exc.errors(), type_offset), model) from exc


def _describe(errors: Sequence[Mapping[str, Any]], type_offset: int) -> str:
    for error in errors:
        kind = error["type"]
        if kind.endswith("_type") or kind in _KIND_ERRORS:
            if error["loc"]:
                return f'body contains incorrect JSON type for field "{_field_path(error["loc"])}"'
            return f"body contains incorrect JSON type (at character {type_offset})"

    for error in errors:
        if error["type"] == "extra_forbidden":
            return f'body contains unknown key "{error["loc"][-1]}"'

    for error in errors:
        if error["type"] == "json_invalid":
            return "body contains badly-formed JSON"

    first = errors[0]
    if first["loc"]:
        return f'{_field_path(first["loc"])}: {first["msg"]}'
    return first["msg"]


def _field_path(loc: Sequence[Any]) -> str:
    return ".".join(str(part) for part in loc)


# ── Path and query parameters ──────────────────────────────────────────────

def _parse_int(raw: str) -> int | None:
    if not _INTEGER_RX.fullmatch(raw):
        return None
    value = int(raw)
    if not -_INT64_MAX - 1 <= value <= _INT64_MAX:
        return None
    return value


def read_id_param(request: Request) -> int:
    """
    Parse the positive integer `id` path parameter.
    Raises ValueError("invalid ID parameter") otherwise.
    """
    raw = request.path_params.get("id")
    value = _parse_int(str(raw)) if raw is not None else None
    if value is None or value < 1:
        raise ValueError("invalid ID parameter")
    return value


def read_string(qs: Mapping[str, str], key: str, default: str) -> str:
    """Return the query value for `key`, or `default` when absent or empty."""
    return qs.get(key) or default


def read_csv(qs: Mapping[str, str], key: str, default: list[str]) -> list[str]:
    """Split a comma-separated query value, e.g. ?genres=drama,comedy."""
    csv = qs.get(key)
    if not csv:
        return default
    return csv.split(",")


def read_int(qs: Mapping[str, str], key: str, default: int, v: Validator) -> int:
    """
    Return the query value for `key` as an int. Records "must be an integer
    value" on `v` and returns `default` when it does not parse.
    """
    raw = qs.get(key)
    if not raw:
        return default

    value = _parse_int(raw)
    if value is None:
        v.add_error(key, "must be an integer value")
        return default
    return value


__all__ = [
    "StrictModel",
    "read_json",
    "decode_json_body",
    "read_id_param",
    "read_string",
    "read_csv",
    "read_int",
]
