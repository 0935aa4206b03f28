import logging
import threading
import uuid
from collections import defaultdict
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Type


@dataclass(kw_only=True)
class Event:
    """Base event class."""
    timestamp: datetime = field(default_factory=datetime.now)
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass
class Subscription:
    """Handle returned by subscribe(); can be used to unsubscribe."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    event_type: Type = Event
    handler: Callable = field(default=lambda e: None)
    async_: bool = False
    active: bool = True

    def cancel(self):
        self.active = False


class EventBus:
    """In-process publish/subscribe hub.

    Handlers registered for a base class also receive its subclasses, so a
    subscriber to :class:`Event` observes everything published on the bus.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, max_workers: int = 2):
        self._logger = logger or logging.getLogger(__name__)
        self._handlers: Dict[Type[Event], List[Subscription]] = defaultdict(list)
        self._executor: Optional[ThreadPoolExecutor] = None
        self._max_workers = max_workers
        self._lock = threading.Lock()

    def subscribe(self, event_type: Type[Event], handler: Callable, async_: bool = False) -> Subscription:
        sub = Subscription(event_type=event_type, handler=handler, async_=async_)
        with self._lock:
            self._handlers[event_type].append(sub)
        return sub

    def unsubscribe(self, subscription: Subscription):
        subscription.active = False
        with self._lock:
            subs = self._handlers.get(subscription.event_type, [])
            if subscription in subs:
                subs.remove(subscription)

    def _matching(self, event: Event) -> List[Subscription]:
        with self._lock:
            matched: List[Subscription] = []
            for klass in type(event).__mro__:
                matched.extend(self._handlers.get(klass, ()))
        return [sub for sub in matched if sub.active]

    def publish(self, event: Event):
        for sub in self._matching(event):
            if sub.async_:
                self._pool().submit(self._safe_call, sub.handler, event)
                continue
            self._safe_call(sub.handler, event)

    def publish_async(self, event: Event) -> List[Future]:
        """Submit every matching handler to the thread pool and return the futures."""
        return [
            self._pool().submit(self._safe_call, sub.handler, event)
            for sub in self._matching(event)
        ]

    def _pool(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers, thread_name_prefix="riseadmin-events"
                )
            return self._executor

    def _safe_call(self, handler, event):
        try:
            handler(event)
        except Exception:
            self._logger.exception("Handler failed for %s", type(event).__name__)

    def shutdown(self):
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)
