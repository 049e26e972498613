# smsguard/services/events.py
from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Dict, List, Protocol, Type

from smsguard.core.exceptions import EventPublishError, SmsGuardException
from smsguard.core.logging import get_logger

logger = get_logger(__name__)

Listener = Callable[[Any], Any]


class EventPublisher(Protocol):
    def publish(self, event: Any) -> None: ...


class EventBus:
    """
    Synchronous in-process dispatcher.

    Listeners are keyed by event class and run in registration order on the
    publishing thread. A failing listener stops the dispatch; domain errors
    pass through as-is, anything else is wrapped in EventPublishError.
    """

    def __init__(self) -> None:
        self._listeners: Dict[Type[Any], List[Listener]] = defaultdict(list)

    def subscribe(self, event_type: Type[Any], listener: Listener) -> None:
        self._listeners[event_type].append(listener)

    def listeners_for(self, event_type: Type[Any]) -> List[Listener]:
        return list(self._listeners.get(event_type, ()))

    def publish(self, event: Any) -> None:
        listeners = self.listeners_for(type(event))
        if not listeners:
            logger.debug("event_without_listeners", event_type=type(event).__name__)
            return
        for listener in listeners:
            try:
                listener(event)
            except SmsGuardException:
                raise
            except Exception as e:
                raise EventPublishError(
                    f"Listener failed for {type(event).__name__}",
                    extra={"listener": getattr(listener, "__qualname__", repr(listener))},
                ) from e


class RecordingEventPublisher:
    """Keeps every published event; handy in tests and dry runs."""

    def __init__(self) -> None:
        self.events: List[Any] = []

    def publish(self, event: Any) -> None:
        self.events.append(event)

    def of_type(self, event_type: Type[Any]) -> List[Any]:
        return [e for e in self.events if isinstance(e, event_type)]

    def clear(self) -> None:
        self.events.clear()
