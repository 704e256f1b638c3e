import logging
import threading
from typing import Type, Callable, List, Dict, Any, Optional
from vbo.domain.events import Event

class EventBus:
    """A synchronous event bus, safe to publish from worker threads.

    Callbacks run on the publishing thread. A failing subscriber is logged and
    does not affect the publisher or the other subscribers.
    """

    def __init__(self):
        self._subscribers: Dict[Type[Event], List[Callable[[Any], None]]] = {}
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    def subscribe(self, event_type: Type[Event], callback: Optional[Callable[[Any], None]] = None):
        """Subscribes a callback to a specific event type. Can be used as a decorator."""
        if callback is None:
            def decorator(func: Callable[[Any], None]):
                self.subscribe(event_type, func)
                return func
            return decorator

        with self._lock:
            self._subscribers.setdefault(event_type, []).append(callback)

    def publish(self, event: Event):
        """Publishes an event to subscribers of its exact type."""
        with self._lock:
            callbacks = list(self._subscribers.get(type(event), ()))
        for callback in callbacks:
            try:
                callback(event)
            except Exception:
                self.logger.exception(f"Subscriber failed for {type(event).__name__}")
