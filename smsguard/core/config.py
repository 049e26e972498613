from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, Optional
from urllib.parse import urlparse, urlunparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# ================================
# HELPERS
# ================================
def _mask_secret(val: Optional[str]) -> Optional[str]:
    if val is None:
        return None
    s = str(val)
    if not s:
        return s
    if len(s) <= 6:
        return "***"
    return s[:3] + "***" + s[-3:]


def _mask_url_password(url: str) -> str:
    p = urlparse(url)
    if not p.password:
        return url
    netloc = p.netloc.replace(f":{p.password}@", f":{_mask_secret(p.password)}@", 1)
    return urlunparse(p._replace(netloc=netloc))


# ================================
# SETTINGS (Pydantic v2)
# ================================
class Settings(BaseSettings):
    """
    SmsGuard configuration.

    - Everything comes from the environment (or .env).
    - SMS_MISMATCH_THRESHOLD is the only policy knob of the lockout engine.
    - SMS_MISMATCH_ATOMIC switches the record batch from a plain pipeline
      to MULTI/EXEC.
    """

    model_config = SettingsConfigDict(
        env_file=(".env.test", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    # ---- base
    PROJECT_NAME: str = Field(default="SmsGuard", description="Project name")
    VERSION: str = Field(default="0.1.0", description="Application version")
    ENVIRONMENT: str = Field(default="development", description="Environment")
    DEBUG: bool = Field(default=False, description="Debug mode")

    # ---- redis
    REDIS_URL: str = Field(default="redis://localhost:6379/0", description="Redis URL")
    REDIS_SOCKET_TIMEOUT: float = Field(default=1.0, gt=0, description="Redis socket timeout, seconds")

    # ---- mismatch lockout policy
    SMS_MISMATCH_THRESHOLD: int = Field(
        default=5, ge=1, description="Distinct code mismatches before the subject is locked out"
    )
    SMS_MISMATCH_KEY_PREFIX: str = Field(
        default="sms.verification.code.mismatch", description="Redis key prefix for attempt sets"
    )
    SMS_MISMATCH_ATOMIC: bool = Field(
        default=False, description="Send the record batch as MULTI/EXEC instead of a plain pipeline"
    )

    # ---- logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(default="json", description="Logging format (json|text)")

    @field_validator("ENVIRONMENT")
    @classmethod
    def _normalize_env(cls, v: str) -> str:
        v = (v or "development").strip().lower()
        if v not in ("development", "production", "test"):
            raise ValueError(f"Unsupported ENVIRONMENT: {v}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return (v or "INFO").strip().upper()

    @field_validator("LOG_FORMAT")
    @classmethod
    def _normalize_format(cls, v: str) -> str:
        v = (v or "json").strip().lower()
        if v not in ("json", "text"):
            raise ValueError(f"Unsupported LOG_FORMAT: {v}")
        return v

    @field_validator("SMS_MISMATCH_KEY_PREFIX")
    @classmethod
    def _strip_prefix(cls, v: str) -> str:
        v = v.strip().rstrip(".")
        if not v:
            raise ValueError("SMS_MISMATCH_KEY_PREFIX must not be empty")
        return v

    # ---- helpers
    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    def dump_settings_safe(self) -> Dict[str, Any]:
        """Settings dump with the redis password masked, safe for logs."""
        data = self.model_dump()
        data["REDIS_URL"] = _mask_url_password(self.REDIS_URL)
        return data


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
