from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bulksms.core.exceptions import ConfigurationError
from bulksms.schemas.sms import GatewayConfig


# ================================
# HELPERS
# ================================
def _under_pytest() -> bool:
    return "PYTEST_CURRENT_TEST" in os.environ


def _mask_secret(val: Optional[str]) -> Optional[str]:
    if val is None:
        return None
    try:
        s = str(val)
    except Exception:
        return "***"
    if not s:
        return s
    if len(s) <= 6:
        return "***"
    return s[:3] + "***" + s[-3:]


def _is_secret_key_name(key: str) -> bool:
    lk = key.lower()
    if any(s in lk for s in ("secret", "password", "token", "dsn")):
        return True
    if "key" in lk and "public" not in lk:
        return True
    return False


def _mask_nested(obj: Any, key_hint: Optional[str] = None) -> Any:
    """
    Recursively mask secret values in dict/list/tuple.
    """
    if isinstance(obj, dict):
        out: Dict[str, Any] = {}
        for k, v in obj.items():
            if isinstance(k, str) and _is_secret_key_name(k):
                if isinstance(v, (dict, list, tuple)):
                    out[k] = _mask_nested(v, key_hint=k)
                else:
                    out[k] = _mask_secret(v)
            else:
                out[k] = _mask_nested(v, key_hint=None)
        return out
    if isinstance(obj, list):
        return [_mask_nested(v, key_hint=key_hint) for v in obj]
    if isinstance(obj, tuple):
        return tuple(_mask_nested(v, key_hint=key_hint) for v in obj)
    if key_hint and _is_secret_key_name(key_hint):
        return _mask_secret(obj)
    return obj


# ================================
# SETTINGS (Pydantic v2)
# ================================
class Settings(BaseSettings):
    """
    Process-wide configuration for the bulk-SMS gateway shim.

    - Loaded once from the environment (and optional .env files), read-only afterwards.
    - BULKSMS_URL / BULKSMS_USERNAME / BULKSMS_PASSWORD are the gateway credentials.
    - Secrets are masked in every dump.
    """

    model_config = SettingsConfigDict(
        env_file=(".env.test", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    # ---- base
    APP_NAME: str = Field(default="bulksms", description="Application name")
    VERSION: str = Field(default="0.1.0", description="Package version")
    ENVIRONMENT: str = Field(default="development", description="Environment")
    DEBUG: bool = Field(default=False, description="Debug mode")

    # ---- logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(default="json", description="Logging format (json|text)")
    LOG_PATH: Optional[str] = Field(default=None, description="Optional log file path")
    EAGER_SIDE_EFFECTS: bool = Field(default=False, description="Configure logging on first settings load")

    # ---- SMS provider
    SMS_PROVIDER: str = Field(default="bulksms", description="Provider resolved by get_sms_client()")
    BULKSMS_URL: Optional[str] = Field(default=None, description="Gateway endpoint (bulksms.url)")
    BULKSMS_USERNAME: str = Field(default="", description="Gateway username (bulksms.username)")
    BULKSMS_PASSWORD: str = Field(default="", description="Gateway password (bulksms.password)")
    BULKSMS_TIMEOUT: float = Field(default=15.0, gt=0, description="Transport timeout, seconds")

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _normalize_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper() or "INFO"
        return v

    @field_validator("LOG_FORMAT", mode="before")
    @classmethod
    def _normalize_format(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            if v not in ("json", "text"):
                raise ValueError("LOG_FORMAT must be 'json' or 'text'")
        return v

    @field_validator("SMS_PROVIDER", mode="before")
    @classmethod
    def _normalize_provider(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    # ---------- derived ----------
    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() in {"prod", "production"}

    def gateway_config(self) -> GatewayConfig:
        """
        Build the immutable gateway configuration the client is constructed with.

        Raises ConfigurationError when BULKSMS_URL is absent or not an http(s) URL.
        """
        url = (self.BULKSMS_URL or "").strip()
        if not url:
            raise ConfigurationError("BULKSMS_URL is not set", code="bulksms_url_missing")
        scheme = (urlparse(url).scheme or "").lower()
        if scheme not in ("http", "https"):
            raise ConfigurationError(
                f"BULKSMS_URL must be an http(s) URL, got scheme {scheme!r}",
                code="bulksms_url_invalid",
            )
        return GatewayConfig(
            url=url,
            username=self.BULKSMS_USERNAME,
            password=self.BULKSMS_PASSWORD,
        )

    def dump_settings_safe(self) -> dict:
        return _mask_nested(self.model_dump())


@lru_cache
def get_settings() -> Settings:
    s = Settings()

    if s.EAGER_SIDE_EFFECTS and not _under_pytest():
        from bulksms.core.logging import setup_logging

        setup_logging(s)
    return s
