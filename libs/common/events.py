"""
In-process async pub/sub event bus.

Listeners are isolated from each other and from the publisher: an exception
in one listener is logged and the remaining listeners still run.

Usage:
    bus = EventBus()
    bus.subscribe("doer.activated", refresh_profile, priority=ListenerPriority.HIGH)
    await bus.publish("doer.activated", {"doer_id": doer.id, "db": session})
"""

import asyncio
import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from libs.common.logging import get_logger

logger = get_logger(__name__)


class ListenerPriority(Enum):
    """Priority levels for event listeners (lower runs first)."""

    CRITICAL = 0
    HIGH = 10
    NORMAL = 50
    LOW = 100


@dataclass
class EventListener:
    callback: Callable[[Dict[str, Any]], Any]
    priority: ListenerPriority
    identifier: str
    once: bool = False


@dataclass
class PublishResult:
    """Outcome of a publish call."""

    event_name: str
    delivered: int = 0
    failed: int = 0

    @property
    def ok(self) -> bool:
        return self.failed == 0


class EventBus:
    """
    Async pub/sub bus with priority ordering and error isolation.

    One bus per application; it is handed to request handlers through the
    activation context rather than reached as a module-level singleton.
    """

    def __init__(self) -> None:
        self._listeners: Dict[str, List[EventListener]] = {}
        self.published: Dict[str, int] = {}

    def subscribe(
        self,
        event_name: str,
        callback: Callable[[Dict[str, Any]], Any],
        priority: ListenerPriority = ListenerPriority.NORMAL,
        identifier: Optional[str] = None,
        once: bool = False,
    ) -> str:
        """
        Subscribe a callback to an event.

        The same identifier is never registered twice for one event.
        Returns the listener identifier for later unsubscription.
        """
        if identifier is None:
            identifier = f"{callback.__module__}.{callback.__qualname__}"

        existing = self._listeners.setdefault(event_name, [])
        if any(listener.identifier == identifier for listener in existing):
            logger.warning(
                "Duplicate listener prevented: %s for event %s", identifier, event_name
            )
            return identifier

        existing.append(
            EventListener(
                callback=callback, priority=priority, identifier=identifier, once=once
            )
        )
        existing.sort(key=lambda listener: listener.priority.value)

        logger.debug(
            "Subscribed %s to %s with priority %s", identifier, event_name, priority.name
        )
        return identifier

    def unsubscribe(self, event_name: str, identifier: str) -> bool:
        listeners = self._listeners.get(event_name, [])
        remaining = [l for l in listeners if l.identifier != identifier]
        self._listeners[event_name] = remaining
        return len(remaining) < len(listeners)

    def listeners(self, event_name: str) -> List[str]:
        return [l.identifier for l in self._listeners.get(event_name, [])]

    def clear(self) -> None:
        """Remove all listeners from all events."""
        self._listeners.clear()
        self.published.clear()

    async def publish(self, event_name: str, data: Dict[str, Any]) -> PublishResult:
        """Deliver an event to every subscribed listener in priority order."""
        self.published[event_name] = self.published.get(event_name, 0) + 1
        result = PublishResult(event_name=event_name)

        listeners = list(self._listeners.get(event_name, []))
        if not listeners:
            logger.debug("No listeners for event: %s", event_name)
            return result

        for listener in listeners:
            try:
                if inspect.iscoroutinefunction(listener.callback):
                    await listener.callback(data)
                else:
                    # Run sync callbacks in executor to avoid blocking
                    loop = asyncio.get_running_loop()
                    await loop.run_in_executor(None, listener.callback, data)
                result.delivered += 1
            except Exception:
                result.failed += 1
                logger.exception(
                    "Listener %s failed for event %s", listener.identifier, event_name
                )
            finally:
                if listener.once:
                    self.unsubscribe(event_name, listener.identifier)

        return result
