"""
Typed event bus for decoupled communication.

Uses Enums for event types to prevent magic strings. The save framework
publishes its lifecycle (save started, load failed, auto-save triggered...)
here so UI and audio layers can react without depending on it.

The bus is thread safe: auto-save runs on its own thread and publishes
from there.

Usage:
    class SaveEvent(Enum):
        SAVE_COMPLETED = auto()

    event_bus.subscribe(SaveEvent.SAVE_COMPLETED, on_saved)
    event_bus.publish(SaveEvent.SAVE_COMPLETED, slot_id="slot1")
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
from weakref import WeakMethod, ref

logger = logging.getLogger(__name__)


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Dictionary of event-specific data
        consumed: Whether the event has been handled
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)
    consumed: bool = False

    def consume(self) -> None:
        """Mark event as consumed (stops propagation)."""
        self.consumed = True

    def get(self, key: str, default: Any = None) -> Any:
        """Get event data by key."""
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


EventHandler = Callable[[Event], None]


@dataclass
class _Subscription:
    priority: int
    handler_ref: Any
    one_shot: bool

    def resolve(self) -> EventHandler | None:
        if isinstance(self.handler_ref, (ref, WeakMethod)):
            return self.handler_ref()
        return self.handler_ref


class EventBus:
    """
    Central event bus for publish/subscribe messaging.

    Features:
    - Typed events (Enum-based)
    - Priority ordering (highest first)
    - Weak references (auto-cleanup when handlers are deleted)
    - One-shot handlers
    - Event consumption (stops propagation)
    - Safe to publish from worker threads
    """

    def __init__(self):
        self._subscriptions: dict[Enum, list[_Subscription]] = {}
        self._lock = threading.RLock()

    def subscribe(
        self,
        event_type: Enum,
        handler: EventHandler,
        priority: int = 0,
        one_shot: bool = False,
        weak: bool = True,
    ) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to listen for
            handler: Callback function(event: Event)
            priority: Higher priority handlers are called first (default 0)
            one_shot: If True, handler is removed after first call
            weak: If True, keep only a weak reference to the handler
        """
        if weak:
            handler_ref = WeakMethod(handler) if hasattr(handler, '__self__') else ref(handler)
        else:
            handler_ref = handler

        subscription = _Subscription(priority, handler_ref, one_shot)
        with self._lock:
            subs = self._subscriptions.setdefault(event_type, [])
            index = len(subs)
            for i, existing in enumerate(subs):
                if priority > existing.priority:
                    index = i
                    break
            subs.insert(index, subscription)

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        """Remove a handler from an event type (no-op if not subscribed)."""
        with self._lock:
            subs = self._subscriptions.get(event_type)
            if not subs:
                return
            self._subscriptions[event_type] = [
                s for s in subs if s.resolve() != handler
            ]

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event to every live handler.

        Returns:
            The Event object (check .consumed to see if it was handled)
        """
        event = Event(type=event_type, data=data)
        self.publish_event(event)
        return event

    def publish_event(self, event: Event) -> None:
        """Publish a pre-created event."""
        with self._lock:
            subs = list(self._subscriptions.get(event.type, ()))

        finished: list[_Subscription] = []
        for sub in subs:
            handler = sub.resolve()
            if handler is None:
                finished.append(sub)
                continue

            try:
                handler(event)
            except Exception:
                logger.exception(f"Error in event handler for {event.type}")

            if sub.one_shot:
                finished.append(sub)
            if event.consumed:
                break

        if finished:
            with self._lock:
                current = self._subscriptions.get(event.type, [])
                self._subscriptions[event.type] = [
                    s for s in current if not any(s is f for f in finished)
                ]

    def handler_count(self, event_type: Enum) -> int:
        """Number of registered handlers for an event type."""
        with self._lock:
            return len(self._subscriptions.get(event_type, ()))

    def clear(self, event_type: Enum | None = None) -> None:
        """
        Clear handlers.

        Args:
            event_type: If specified, only clear handlers for this type.
                       If None, clear all handlers.
        """
        with self._lock:
            if event_type is None:
                self._subscriptions.clear()
            else:
                self._subscriptions.pop(event_type, None)
