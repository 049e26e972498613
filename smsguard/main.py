"""
Wiring: settings -> Redis -> attempt store -> mismatch handler -> event bus.

    from smsguard.main import create_guard

    guard = create_guard()
    guard.handle(SmsVerificationCodeMismatchEvent(...))
"""

from __future__ import annotations

from typing import Optional

import redis

from smsguard.core.clock import Clock, SystemClock
from smsguard.core.config import Settings, get_settings
from smsguard.core.logging import get_logger, setup_logging
from smsguard.core.redis_client import create_redis, get_redis
from smsguard.services.attempt_store import RedisAttemptStore
from smsguard.services.events import EventBus, EventPublisher
from smsguard.services.mismatch_handler import SmsVerificationCodeMismatchEventHandler

logger = get_logger(__name__)


def create_guard(
    settings: Optional[Settings] = None,
    *,
    redis_client: Optional[redis.Redis] = None,
    bus: Optional[EventBus] = None,
    publisher: Optional[EventPublisher] = None,
    clock: Optional[Clock] = None,
) -> SmsVerificationCodeMismatchEventHandler:
    """
    Build a ready-to-use handler and subscribe it to ``bus``.

    Lockout events go to ``publisher`` when given, otherwise back onto ``bus``
    so downstream listeners can subscribe to them there.
    """
    if settings is None:
        settings = get_settings()
        client = redis_client if redis_client is not None else get_redis()
    else:
        client = redis_client if redis_client is not None else create_redis(settings)
    setup_logging(settings)

    bus = bus if bus is not None else EventBus()
    store = RedisAttemptStore(client, atomic=settings.SMS_MISMATCH_ATOMIC)
    handler = SmsVerificationCodeMismatchEventHandler(
        store,
        publisher if publisher is not None else bus,
        clock or SystemClock(),
        threshold=settings.SMS_MISMATCH_THRESHOLD,
        key_prefix=settings.SMS_MISMATCH_KEY_PREFIX,
    )
    handler.subscribe(bus)
    logger.info(
        "sms_guard_ready",
        threshold=settings.SMS_MISMATCH_THRESHOLD,
        atomic=settings.SMS_MISMATCH_ATOMIC,
        key_prefix=settings.SMS_MISMATCH_KEY_PREFIX,
    )
    return handler
