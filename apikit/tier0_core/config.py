"""
apikit.tier0_core.config
────────────────────────
Typed configuration with env layering. Reads from .env → environment
variables. All fields are typed via Pydantic; bad values fail at startup,
not in the middle of a request.

Minimal stack: pydantic-settings + python-dotenv
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_BODY_BYTES = 1_048_576


class ApiKitConfig(BaseSettings):
    """
    Typed apikit configuration. Env vars are prefixed with APIKIT_ unless
    overridden.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ── Application ───────────────────────────────────────────────────────────
    environment: str = Field(default="development", alias="APP_ENV")

    # ── Request bodies ────────────────────────────────────────────────────────
    max_body_bytes: int = Field(default=DEFAULT_MAX_BODY_BYTES, alias="APIKIT_MAX_BODY_BYTES")

    # ── Responses ─────────────────────────────────────────────────────────────
    include_error_cause: bool = Field(default=False, alias="APIKIT_INCLUDE_ERROR_CAUSE")
    json_indent: str = Field(default="\t", alias="APIKIT_JSON_INDENT")

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", alias="APIKIT_LOG_LEVEL")
    log_format: str = Field(default="json", alias="APIKIT_LOG_FORMAT")

    @field_validator("environment")
    @classmethod
    def validate_env(cls, v: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if v.lower() not in allowed:
            raise ValueError(f"environment must be one of {allowed}, got {v!r}")
        return v.lower()

    @field_validator("max_body_bytes")
    @classmethod
    def validate_max_body_bytes(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"max_body_bytes must be positive, got {v}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in {"json", "console"}:
            raise ValueError(f"log_format must be 'json' or 'console', got {v!r}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        return self.environment == "test"


@lru_cache(maxsize=1)
def get_config() -> ApiKitConfig:
    """
    Return the singleton apikit config. Cached after first call.
    Call _reset_config() in tests to pick up new env vars.
    """
    return ApiKitConfig()


def _reset_config() -> None:
    """For tests: clear the config cache."""
    get_config.cache_clear()


__all__ = ["ApiKitConfig", "DEFAULT_MAX_BODY_BYTES", "get_config"]
