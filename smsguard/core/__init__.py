from smsguard.core.config import Settings, get_settings, settings
from smsguard.core.exceptions import AttemptStoreError, EventPublishError, InvalidEventError, SmsGuardException

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "SmsGuardException",
    "AttemptStoreError",
    "InvalidEventError",
    "EventPublishError",
]
