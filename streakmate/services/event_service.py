"""
In-process event bus.
Status transitions and deletions are published here; transports (WebSocket, logs) subscribe.
"""
import logging
from threading import Lock
from typing import Callable, List

logger = logging.getLogger("streakmate.events")

Listener = Callable[[str, dict], None]


class EventBus:
    """Fan-out of habit events to subscribed listeners"""

    def __init__(self):
        self._listeners: List[Listener] = []
        self._lock = Lock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            Function that removes the listener again
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event_type: str, payload: dict) -> None:
        """Deliver an event to every listener. A failing listener does not affect the others."""
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event_type, payload)
            except Exception as e:
                logger.error(f"Event listener failed for {event_type}: {e}")
