"""
apikit.tier0_core.logging
─────────────────────────
Structured logs for request handling. Every line emitted while a request is
being answered carries its method and URI, and credential-like fields
(including those inside a logged headers mapping) are masked before output.

Minimal stack: structlog + stdout JSON
Configure via: APIKIT_LOG_LEVEL, APIKIT_LOG_FORMAT=json|console
"""
from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Mapping

import structlog
from starlette.requests import Request

from apikit.tier0_core.config import ApiKitConfig, get_config

REDACTED = "[REDACTED]"

_REDACT_KEYS = frozenset({
    "password", "secret", "token", "api_key", "authorization",
    "proxy_authorization", "cookie", "set_cookie", "access_token", "refresh_token",
})


# ── Redaction processor ───────────────────────────────────────────────────────

def _is_sensitive(key: Any) -> bool:
    # header names arrive as X-Api-Key, Set-Cookie, ...
    return str(key).lower().replace("-", "_") in _REDACT_KEYS


def _redact_processor(logger: Any, method: str, event_dict: dict) -> dict:
    """Mask sensitive fields, one level into mappings such as `headers`."""
    for key, value in list(event_dict.items()):
        if _is_sensitive(key):
            event_dict[key] = REDACTED
        elif isinstance(value, Mapping):
            event_dict[key] = {
                k: REDACTED if _is_sensitive(k) else v for k, v in value.items()
            }
    return event_dict


# ── Configuration ─────────────────────────────────────────────────────────────

_handler: logging.Handler | None = None


def _renderer(config: ApiKitConfig) -> Any:
    if config.log_format == "console":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def configure_logging(config: ApiKitConfig | None = None) -> None:
    """
    Route structlog and stdlib logging through one stdout handler.
    Safe to call again: the previous apikit handler is replaced, not stacked.
    """
    global _handler
    config = config or get_config()
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        _redact_processor,
    ]

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            _renderer(config),
        ],
    ))

    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)
    root.addHandler(handler)
    root.setLevel(level)
    _handler = handler


# ── Public API ────────────────────────────────────────────────────────────────

def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Return a structured logger bound to the given name.

    Usage:
        log = get_logger(__name__)
        log.debug("request_body_rejected", model="CreateMovie", reason=message)
    """
    if _handler is None:
        configure_logging()
    return structlog.get_logger(name or __name__)


def request_uri(request: Request) -> str:
    """Path plus query string, as the client sent it."""
    url = request.url
    return f"{url.path}?{url.query}" if url.query else url.path


@contextmanager
def request_context(request: Request) -> Iterator[None]:
    """Bind `method` and `uri` to every log line emitted inside the block."""
    with structlog.contextvars.bound_contextvars(
        method=request.method, uri=request_uri(request)
    ):
        yield


__all__ = [
    "REDACTED",
    "configure_logging",
    "get_logger",
    "request_uri",
    "request_context",
]
