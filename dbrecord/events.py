"""
Lifecycle events and the notifier that dispatches them.

Records publish four events around their writes:

- BeforeSaveEvent(insert, record)  cancelable
- AfterSaveEvent(record)
- BeforeDeleteEvent(record)        cancelable
- AfterDeleteEvent(record)

Listeners are plain callables receiving the event. A listener vetoes a
cancelable event either by setting `event.is_valid = False` or by returning
False; dispatch stops at the first veto. Exceptions raised by a listener are
not caught here and reach whoever triggered the event.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple, Type

from dbrecord.utils.logging import get_logger

if TYPE_CHECKING:
    from dbrecord.record import Record

log = get_logger(__name__)

Listener = Callable[["Event"], Any]


@dataclass
class Event:
    """Base class of all record events."""

    record: "Record"


@dataclass
class CancelableEvent(Event):
    """An event whose listeners may veto the pending operation."""

    is_valid: bool = field(default=True, kw_only=True)


@dataclass
class BeforeSaveEvent(CancelableEvent):
    """Fired before INSERT/UPDATE; `insert` tells which one is pending."""

    insert: bool = field(default=False, kw_only=True)


@dataclass
class AfterSaveEvent(Event):
    pass


@dataclass
class BeforeDeleteEvent(CancelableEvent):
    pass


@dataclass
class AfterDeleteEvent(Event):
    pass


class EventNotifier:
    """
    Publish/subscribe registry keyed by event class.

    Listeners with a higher priority run first; equal priorities keep
    subscription order. Subscribers of a base class (e.g. `Event`) receive every
    subclass event as well.
    """

    def __init__(self) -> None:
        # event type -> [(priority, sequence, listener)]
        self._listeners: Dict[Type[Event], List[Tuple[int, int, Listener]]] = {}
        self._sequence = 0

    def on(self, event_type: Type[Event], listener: Listener, priority: int = 0) -> None:
        """
        Subscribe `listener` to `event_type`.

        Parameters
        ----------
        event_type : type[Event]
            Event class to listen for.
        listener : Callable[[Event], Any]
            Called with the event instance.
        priority : int
            Higher values run earlier.
        """
        entries = self._listeners.setdefault(event_type, [])
        if any(existing == listener for _, _, existing in entries):
            return
        self._sequence += 1
        entries.append((priority, self._sequence, listener))

    def off(self, event_type: Type[Event], listener: Listener) -> None:
        """Unsubscribe `listener`; unknown listeners are ignored."""
        entries = self._listeners.get(event_type)
        if not entries:
            return
        self._listeners[event_type] = [e for e in entries if e[2] != listener]

    def clear(self, event_type: Optional[Type[Event]] = None) -> None:
        if event_type is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event_type, None)

    def listeners(self, event_type: Type[Event]) -> List[Listener]:
        """Listeners that would receive an event of `event_type`, in call order."""
        entries = [
            entry
            for registered, bucket in self._listeners.items()
            if issubclass(event_type, registered)
            for entry in bucket
        ]
        entries.sort(key=lambda entry: (-entry[0], entry[1]))
        return [listener for _, _, listener in entries]

    def trigger(self, event: Event) -> Event:
        """
        Dispatch `event` to its listeners and return it.

        For cancelable events, dispatch stops as soon as the event is invalid.
        """
        for listener in self.listeners(type(event)):
            result = listener(event)
            if not isinstance(event, CancelableEvent):
                continue
            if result is False:
                event.is_valid = False
            if not event.is_valid:
                log.debug(
                    "Event vetoed by listener",
                    extra={"event": type(event).__name__, "listener": repr(listener)},
                )
                break
        return event


__all__ = [
    "Event",
    "CancelableEvent",
    "BeforeSaveEvent",
    "AfterSaveEvent",
    "BeforeDeleteEvent",
    "AfterDeleteEvent",
    "EventNotifier",
    "Listener",
]
