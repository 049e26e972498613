# tests/conftest.py
"""
Pytest fixtures for SmsGuard.

- FakeRedis: in-memory stand-in for the handful of Redis commands the attempt
  store uses (SADD/EXPIREAT/SCARD/DELETE/TTL + pipeline), driven by the test clock.
- Ready-made store/handler/publisher/clock fixtures and a mismatch event factory.
"""

from __future__ import annotations

import math
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_FORMAT", "text")

from smsguard.core.clock import FixedClock
from smsguard.schemas.events import SmsVerificationCodeMismatchEvent, SmsVerificationCodeVerifiedEvent
from smsguard.services.attempt_store import RedisAttemptStore
from smsguard.services.events import RecordingEventPublisher
from smsguard.services.mismatch_handler import SmsVerificationCodeMismatchEventHandler

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
MOBILE = "+8613800138000"
SCOPE = "SMS_LOGIN"


# ======================================================================================
# Fake Redis
# ======================================================================================
class FakePipeline:
    def __init__(self, client: "FakeRedis", transaction: bool):
        self.client = client
        self.transaction = transaction
        self.commands: List[Tuple[str, tuple]] = []

    def __enter__(self) -> "FakePipeline":
        return self

    def __exit__(self, *exc) -> None:
        self.commands = []

    def sadd(self, key, *members):
        self.commands.append(("sadd", (key, *members)))
        return self

    def expireat(self, key, when):
        self.commands.append(("expireat", (key, when)))
        return self

    def scard(self, key):
        self.commands.append(("scard", (key,)))
        return self

    def execute(self) -> List[Any]:
        self.client.calls.append(("pipeline", self.transaction, [c for c, _ in self.commands]))
        self.client._check()
        replies = [getattr(self.client, "_" + name)(*args) for name, args in self.commands]
        self.commands = []
        return replies


class FakeRedis:
    def __init__(self, now: Callable[[], float]):
        self._now = now
        self.sets: Dict[str, Set[str]] = {}
        self.expiry: Dict[str, float] = {}
        self.calls: List[Any] = []
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise RedisConnectionError("redis is down")

    def _evict(self, key: str) -> None:
        at = self.expiry.get(key)
        if at is not None and at <= self._now():
            self.sets.pop(key, None)
            self.expiry.pop(key, None)

    # raw commands
    def _sadd(self, key: str, *members: str) -> int:
        self._evict(key)
        s = self.sets.setdefault(key, set())
        before = len(s)
        s.update(members)
        return len(s) - before

    def _expireat(self, key: str, when: int) -> bool:
        self._evict(key)
        if key not in self.sets:
            return False
        self.expiry[key] = float(when)
        self._evict(key)
        return True

    def _scard(self, key: str) -> int:
        self._evict(key)
        return len(self.sets.get(key, ()))

    # client API
    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self, transaction)

    def scard(self, key: str) -> int:
        self._check()
        return self._scard(key)

    def delete(self, *keys: str) -> int:
        self.calls.append(("delete", keys))
        self._check()
        removed = 0
        for key in keys:
            self._evict(key)
            if self.sets.pop(key, None) is not None:
                removed += 1
            self.expiry.pop(key, None)
        return removed

    def ttl(self, key: str) -> int:
        self._check()
        self._evict(key)
        if key not in self.sets:
            return -2
        if key not in self.expiry:
            return -1
        return math.ceil(self.expiry[key] - self._now())

    def members(self, key: str) -> Set[str]:
        self._evict(key)
        return set(self.sets.get(key, ()))


# ======================================================================================
# Fixtures
# ======================================================================================
@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(T0)


@pytest.fixture
def fake_redis(clock: FixedClock) -> FakeRedis:
    return FakeRedis(now=lambda: clock.now().timestamp())


@pytest.fixture
def store(fake_redis: FakeRedis) -> RedisAttemptStore:
    return RedisAttemptStore(fake_redis)


@pytest.fixture
def publisher() -> RecordingEventPublisher:
    return RecordingEventPublisher()


@pytest.fixture
def handler(store, publisher, clock) -> SmsVerificationCodeMismatchEventHandler:
    return SmsVerificationCodeMismatchEventHandler(store, publisher, clock, threshold=5)


@pytest.fixture
def make_mismatch(clock: FixedClock) -> Callable[..., SmsVerificationCodeMismatchEvent]:
    def _make(
        mobile: str = MOBILE,
        scope: str = SCOPE,
        expires_in: timedelta = timedelta(minutes=5),
        expires_at: Optional[datetime] = None,
        **kwargs: Any,
    ) -> SmsVerificationCodeMismatchEvent:
        return SmsVerificationCodeMismatchEvent(
            when=clock.now(),
            mobile=mobile,
            scope=scope,
            expires_at=expires_at or clock.now() + expires_in,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_verified(clock: FixedClock) -> Callable[..., SmsVerificationCodeVerifiedEvent]:
    def _make(mobile: str = MOBILE, scope: str = SCOPE) -> SmsVerificationCodeVerifiedEvent:
        return SmsVerificationCodeVerifiedEvent(when=clock.now(), mobile=mobile, scope=scope)

    return _make
