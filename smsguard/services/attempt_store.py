"""
Redis-backed store of SMS code mismatch attempts.

One Redis set per subject. Each mismatch is recorded with a single pipelined
round trip (SADD + EXPIREAT + SCARD) so the returned cardinality already
includes the record just added and the set lives exactly as long as the most
recently checked code.

A plain pipeline is not a transaction: other clients may interleave commands
on the same key between the three steps. Pass ``atomic=True`` to send the batch
as MULTI/EXEC instead.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List

import redis
from redis.exceptions import RedisError

from smsguard.core.exceptions import AttemptStoreError
from smsguard.core.logging import get_logger

logger = get_logger(__name__)


class RedisAttemptStore:
    def __init__(self, client: redis.Redis, *, atomic: bool = False):
        self.client = client
        self.atomic = atomic

    def record_and_count(self, key: str, record: str, expires_at: datetime) -> int:
        """Add ``record`` to the set at ``key``, expire the key at ``expires_at``, return the set size."""
        try:
            with self.client.pipeline(transaction=self.atomic) as pipe:
                pipe.sadd(key, record)
                pipe.expireat(key, int(expires_at.timestamp()))
                pipe.scard(key)
                replies: List[Any] = pipe.execute()
        except RedisError as e:
            logger.warning("attempt_store_record_failed", key=key, error=str(e))
            raise AttemptStoreError(f"Failed to record mismatch for {key}", extra={"key": key}) from e

        logger.debug("sms_mismatch_pipeline", key=key, replies=replies)
        if len(replies) != 3:
            raise AttemptStoreError(
                f"Unexpected pipeline reply for {key}", extra={"key": key, "replies": len(replies)}
            )
        return int(replies[-1])

    def clear(self, key: str) -> None:
        """Delete the set at ``key``; absent keys are fine."""
        try:
            self.client.delete(key)
        except RedisError as e:
            logger.warning("attempt_store_clear_failed", key=key, error=str(e))
            raise AttemptStoreError(f"Failed to clear attempts for {key}", extra={"key": key}) from e

    def count(self, key: str) -> int:
        try:
            return int(self.client.scard(key))
        except RedisError as e:
            raise AttemptStoreError(f"Failed to count attempts for {key}", extra={"key": key}) from e

    def ttl(self, key: str) -> int:
        """Remaining TTL in seconds (-2 when the key is absent, -1 without expiry)."""
        try:
            return int(self.client.ttl(key))
        except RedisError as e:
            raise AttemptStoreError(f"Failed to read TTL for {key}", extra={"key": key}) from e
