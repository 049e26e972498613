"""
Facts consumed and produced by the mismatch lockout engine.
"""

import uuid
from datetime import datetime, timezone
from typing import Annotated, Any, Mapping, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationError, field_validator

from smsguard.core.clock import utc_now
from smsguard.core.exceptions import InvalidEventError

MobilePhoneNumber = Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^\+?[0-9]{1,31}$")]
SmsVerificationScope = Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^[A-Za-z0-9_\-]{1,64}$")]


def _new_id() -> str:
    return str(uuid.uuid4())


def _as_utc(v: datetime) -> datetime:
    # naive timestamps are taken as UTC
    if v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v.astimezone(timezone.utc)


class SmsVerificationEvent(BaseModel):
    """Base event: identity, timestamp and the subject (mobile + scope)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(default_factory=_new_id, min_length=1, description="Event id")
    when: datetime = Field(default_factory=utc_now, description="When the event happened")
    mobile: MobilePhoneNumber = Field(..., description="Mobile phone number")
    scope: SmsVerificationScope = Field(..., description="Usage scope of the code")

    @field_validator("when")
    @classmethod
    def _when_utc(cls, v: datetime) -> datetime:
        return _as_utc(v)


class SmsVerificationCodeMismatchEvent(SmsVerificationEvent):
    """A submitted code did not match; carries the checked code's expiry."""

    expires_at: datetime = Field(..., description="Expiry of the code that was checked")

    @field_validator("expires_at")
    @classmethod
    def _expires_at_utc(cls, v: datetime) -> datetime:
        return _as_utc(v)

    def to_record(self) -> str:
        """Set member for this mismatch; equal only when every field is equal."""
        return self.model_dump_json()


class SmsVerificationCodeVerifiedEvent(SmsVerificationEvent):
    """A submitted code matched."""


class TooManyFailureSmsVerificationAttemptsEvent(SmsVerificationEvent):
    """Subject reached the mismatch threshold within the code's validity window."""


E = TypeVar("E", bound=SmsVerificationEvent)


def parse_event(payload: Mapping[str, Any], event_type: Type[E]) -> E:
    """Build an event from a raw mapping, rejecting malformed input."""
    try:
        return event_type.model_validate(dict(payload))
    except ValidationError as e:
        raise InvalidEventError(
            f"Malformed {event_type.__name__}",
            extra={"errors": e.errors(include_url=False, include_context=False)},
        ) from e
