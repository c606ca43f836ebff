# bulksms/core/logging.py
"""
Centralized logging for the bulk-SMS shim.

Features:
- Stdlib logging (dictConfig) + structlog (JSON or dev console renderer).
- Optional size-based rotating log file (LOG_PATH).
- Sensitive fields redaction (passwords never reach a handler).
- Per-send correlation id via contextvars (bound_context).

Nothing is configured at import time: the hosting application calls
setup_logging(), or sets EAGER_SIDE_EFFECTS=1 to have get_settings() do it.
Until then events go to stdlib loggers and follow stdlib defaults (warnings
and above only).
"""

from __future__ import annotations

import logging
import logging.config
import os
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

import structlog

if TYPE_CHECKING:  # pragma: no cover
    from bulksms.core.config import Settings

# ---------- Context vars ----------
_ctx_request_id: ContextVar[str] = ContextVar("request_id", default="")
_ctx_provider: ContextVar[str] = ContextVar("provider", default="")

_CONFIGURED = False

# ---------- Secrets redaction ----------
_SECRET_KEYS = ("secret", "password", "token", "dsn", "api_key", "api_secret", "access_key")


def _mask_secret_value(v: Any) -> Any:
    try:
        s = str(v)
    except Exception:
        return "***"
    if len(s) <= 6:
        return "***"
    return s[:3] + "***" + s[-3:]


def redact_secrets(data: Any) -> Any:
    if isinstance(data, dict):
        out: Dict[str, Any] = {}
        for k, v in data.items():
            lk = str(k).lower()
            if any(x in lk for x in _SECRET_KEYS) and "public" not in lk:
                out[k] = _mask_secret_value(v)
            else:
                out[k] = redact_secrets(v)
        return out
    if isinstance(data, list):
        return [redact_secrets(v) for v in data]
    if isinstance(data, tuple):
        return tuple(redact_secrets(v) for v in data)
    return data


# ---------- structlog processors ----------
def _inject_context(_, __, event_dict):
    rid = _ctx_request_id.get()
    prov = _ctx_provider.get()
    if rid:
        event_dict["request_id"] = rid
    if prov:
        event_dict["provider"] = prov
    return event_dict


def _redact_processor(_, __, event_dict):
    return redact_secrets(event_dict)


def _add_app(settings: "Settings"):
    def _inner(_, __, event_dict):
        event_dict["app"] = settings.APP_NAME
        event_dict["version"] = settings.VERSION
        return event_dict

    return _inner


# ---------- Stdlib dictConfig ----------
def _build_stdlib_dict_config(settings: "Settings") -> dict:
    level = settings.LOG_LEVEL
    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "level": level,
            "class": "logging.StreamHandler",
            "formatter": "plain",
            "stream": "ext://sys.stdout",
        },
    }
    if settings.LOG_PATH:
        logs_dir = os.path.dirname(settings.LOG_PATH)
        if logs_dir:
            os.makedirs(logs_dir, exist_ok=True)
        handlers["file"] = {
            "level": level,
            "class": "logging.handlers.RotatingFileHandler",
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
            "formatter": "plain",
            "filename": settings.LOG_PATH,
            "encoding": "utf8",
        }

    # structlog renders the final line, stdlib only ships it
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {"format": "%(message)s"},
        },
        "handlers": handlers,
        "loggers": {
            "": {"handlers": list(handlers), "level": level, "propagate": False},
            "httpx": {"level": "WARNING"},
            "httpcore": {"level": "WARNING"},
        },
    }


# ---------- structlog configure ----------
def _configure_structlog(settings: "Settings") -> None:
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        _inject_context,
        _redact_processor,
        _add_app(settings),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.LOG_FORMAT == "json"
        else structlog.dev.ConsoleRenderer()
    )
    processors.append(renderer)

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


# ---------- Public API ----------
def setup_logging(settings: Optional["Settings"] = None) -> None:
    """
    Centralized logging setup:
    - stdlib dictConfig (console + optional rotating file)
    - structlog (JSON/console)
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    if settings is None:
        from bulksms.core.config import get_settings

        settings = get_settings()

    logging.config.dictConfig(_build_stdlib_dict_config(settings))
    _configure_structlog(settings)

    lg = get_logger(__name__)
    lg.info("logging_initialized", level=settings.LOG_LEVEL, format=settings.LOG_FORMAT)
    lg.debug("settings_loaded", settings=settings.dump_settings_safe())

    _CONFIGURED = True


def reset_logging() -> None:
    """Forget the configured state so setup_logging() runs again."""
    global _CONFIGURED
    _CONFIGURED = False
    structlog.reset_defaults()


def get_logger(name: str):
    # always backed by a stdlib logger: silent until the host configures logging
    return structlog.wrap_logger(logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger)


# ---------- Context helpers ----------
def current_request_id() -> str:
    return _ctx_request_id.get()


@contextmanager
def bound_context(
    request_id: Optional[str] = None,
    provider: Optional[str] = None,
):
    """Bind context values for every log event inside the block, then restore."""
    tokens: list[Tuple[ContextVar[str], Token]] = []
    if request_id is not None:
        tokens.append((_ctx_request_id, _ctx_request_id.set(request_id)))
    if provider is not None:
        tokens.append((_ctx_provider, _ctx_provider.set(provider)))
    try:
        yield
    finally:
        for var, tok in reversed(tokens):
            var.reset(tok)


__all__ = [
    "setup_logging",
    "reset_logging",
    "get_logger",
    "bound_context",
    "current_request_id",
    "redact_secrets",
]
