# smsguard/core/logging.py
"""
Centralized logging for SmsGuard.

- Stdlib logging + structlog (JSON in prod or LOG_FORMAT=json, console otherwise).
- Sensitive fields redaction.
- App name/version stamped on every event.

Env knobs (via settings):
  LOG_LEVEL=INFO
  LOG_FORMAT=json|text
  ENVIRONMENT=production|development|test
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Dict, Optional

import structlog

from smsguard.core.config import Settings, settings

_CONFIGURED = False

# ---------- Secrets redaction ----------
_SECRET_KEYS = ("secret", "password", "token", "dsn", "api_key", "api_secret", "access_key")


def _mask_secret_value(v: Any) -> Any:
    s = str(v)
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
def _redact_processor(_, __, event_dict):
    return redact_secrets(event_dict)


def _add_app(cfg: Settings):
    def _inner(_, __, event_dict):
        event_dict["app"] = cfg.PROJECT_NAME
        event_dict["version"] = cfg.VERSION
        return event_dict

    return _inner


def _use_json(cfg: Settings) -> bool:
    return cfg.LOG_FORMAT == "json" or cfg.is_production


def _configure_structlog(cfg: Settings) -> None:
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        _redact_processor,
        _add_app(cfg),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    renderer = structlog.processors.JSONRenderer() if _use_json(cfg) else structlog.dev.ConsoleRenderer()
    processors.append(renderer)

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


# ---------- Public API ----------
def setup_logging(cfg: Optional[Settings] = None) -> None:
    """
    Idempotent logging setup from ``cfg`` (global settings when omitted); the first call wins:
    - stdlib root handler on stdout at LOG_LEVEL (DEBUG when DEBUG=1)
    - structlog on top of it
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    cfg = cfg or settings
    level = logging.DEBUG if cfg.DEBUG else getattr(logging, cfg.LOG_LEVEL, logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger().setLevel(level)
    _configure_structlog(cfg)

    lg = get_logger(__name__)
    lg.info("logging_initialized", level=logging.getLevelName(level), json=_use_json(cfg))
    lg.debug("settings", **cfg.dump_settings_safe())

    _CONFIGURED = True


def get_logger(name: str):
    return structlog.get_logger(name)
