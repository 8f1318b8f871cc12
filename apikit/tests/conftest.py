"""
apikit test configuration.

Tests run against the default configuration. Override by setting
environment variables before running pytest, or per test with
monkeypatch + the `reset_config` fixture.
"""
from __future__ import annotations

import os

import pytest

# ── Force test settings ────────────────────────────────────────────────────
# These must be set before any apikit modules are imported.

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("APIKIT_LOG_LEVEL", "WARNING")


# ── Fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def reset_config():
    """Drop the cached config around every test so env changes are picked up."""
    from apikit.tier0_core.config import _reset_config

    _reset_config()
    yield _reset_config
    _reset_config()


@pytest.fixture
def make_request():
    """Build a bare Starlette Request for calling response helpers directly."""
    from starlette.requests import Request

    def _make(method: str = "GET", path: str = "/", query: bytes = b"", path_params=None):
        scope = {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": query,
            "headers": [],
            "path_params": path_params or {},
        }
        return Request(scope)

    return _make
