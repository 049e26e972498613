"""
SMS code mismatch lockout.

Every mismatch for a (mobile, scope) subject lands in a Redis set that expires
together with the checked code. Once the set reaches ``threshold`` members it
is deleted and a TooManyFailureSmsVerificationAttemptsEvent is published.
A verified code deletes the set.

No state is kept in process; replicas share everything through Redis.
"""

from __future__ import annotations

import uuid
from typing import Optional

from smsguard.core.clock import Clock
from smsguard.core.exceptions import InvalidEventError
from smsguard.core.logging import get_logger
from smsguard.schemas.events import (
    SmsVerificationCodeMismatchEvent,
    SmsVerificationCodeVerifiedEvent,
    TooManyFailureSmsVerificationAttemptsEvent,
)
from smsguard.services.attempt_store import RedisAttemptStore
from smsguard.services.events import EventBus, EventPublisher
from smsguard.services.keys import DEFAULT_KEY_PREFIX, mismatch_key

logger = get_logger(__name__)

DEFAULT_THRESHOLD = 5


class SmsVerificationCodeMismatchEventHandler:
    def __init__(
        self,
        store: RedisAttemptStore,
        publisher: EventPublisher,
        clock: Clock,
        *,
        threshold: int = DEFAULT_THRESHOLD,
        key_prefix: str = DEFAULT_KEY_PREFIX,
    ):
        self.store = store
        self.publisher = publisher
        self.clock = clock
        self.key_prefix = key_prefix
        self.threshold = threshold

    @property
    def threshold(self) -> int:
        return self._threshold

    @threshold.setter
    def threshold(self, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValueError(f"threshold must be a positive integer, got {value!r}")
        self._threshold = value

    def key_for(self, mobile: str, scope: str) -> str:
        return mismatch_key(mobile, scope, self.key_prefix)

    def on_mismatch(
        self, event: SmsVerificationCodeMismatchEvent
    ) -> Optional[TooManyFailureSmsVerificationAttemptsEvent]:
        """Record the mismatch; publish and return a lockout event when the threshold is reached."""
        logger.debug("sms_mismatch_received", **event.model_dump(mode="json"))
        key = self.key_for(event.mobile, event.scope)

        # store errors propagate: an unrecorded mismatch must not look like "no mismatch"
        attempts = self.store.record_and_count(key, event.to_record(), event.expires_at)
        if attempts < self.threshold:
            return None

        logger.info(
            "sms_mismatch_threshold_reached",
            mobile=event.mobile,
            scope=event.scope,
            attempts=attempts,
            threshold=self.threshold,
        )
        self.store.clear(key)
        lockout = TooManyFailureSmsVerificationAttemptsEvent(
            id=str(uuid.uuid4()),
            when=self.clock.now(),
            mobile=event.mobile,
            scope=event.scope,
        )
        try:
            self.publisher.publish(lockout)
        except Exception:
            # the attempt set is already gone; the lockout is lost for this crossing
            logger.error("sms_lockout_publish_failed", mobile=event.mobile, scope=event.scope, lockout_id=lockout.id)
            raise
        return lockout

    def on_verified(self, event: SmsVerificationCodeVerifiedEvent) -> None:
        """Drop all recorded mismatches for the subject."""
        key = self.key_for(event.mobile, event.scope)
        self.store.clear(key)
        logger.debug("sms_mismatch_cleared", mobile=event.mobile, scope=event.scope)

    def handle(self, event) -> Optional[TooManyFailureSmsVerificationAttemptsEvent]:
        if isinstance(event, SmsVerificationCodeMismatchEvent):
            return self.on_mismatch(event)
        if isinstance(event, SmsVerificationCodeVerifiedEvent):
            self.on_verified(event)
            return None
        raise InvalidEventError(f"Unsupported event type: {type(event).__name__}")

    def subscribe(self, bus: EventBus) -> None:
        bus.subscribe(SmsVerificationCodeMismatchEvent, self.on_mismatch)
        bus.subscribe(SmsVerificationCodeVerifiedEvent, self.on_verified)
