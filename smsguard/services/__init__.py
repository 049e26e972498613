from smsguard.services.attempt_store import RedisAttemptStore
from smsguard.services.events import EventBus, EventPublisher, RecordingEventPublisher
from smsguard.services.keys import mismatch_key
from smsguard.services.mismatch_handler import SmsVerificationCodeMismatchEventHandler

__all__ = [
    "RedisAttemptStore",
    "EventBus",
    "EventPublisher",
    "RecordingEventPublisher",
    "mismatch_key",
    "SmsVerificationCodeMismatchEventHandler",
]
