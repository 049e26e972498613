# smsguard/core/redis_client.py
from __future__ import annotations

from typing import Optional

import redis

from smsguard.core.config import Settings, get_settings

_redis_client: Optional[redis.Redis] = None


def create_redis(cfg: Settings) -> redis.Redis:
    """New client for ``cfg.REDIS_URL``; connects lazily on the first command."""
    return redis.Redis.from_url(
        cfg.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
        socket_timeout=cfg.REDIS_SOCKET_TIMEOUT,
        socket_connect_timeout=cfg.REDIS_SOCKET_TIMEOUT,
    )


def get_redis() -> redis.Redis:
    """Lazy init of the process-wide Redis client."""
    global _redis_client
    if _redis_client is None:
        _redis_client = create_redis(get_settings())
    return _redis_client


def reset_redis() -> None:
    global _redis_client
    if _redis_client is not None:
        _redis_client.close()
    _redis_client = None
