"""Publisher for decoded Julius events with thread-safe subscriber management.

Subscribers register per event kind.  The client's receive loop publishes
every event decoded from a record; request/reply helpers use one-shot waits
built on the same registry.
"""

import asyncio
import logging
import threading
from typing import Any, Callable

from julius_client.protocol.types import SIGNAL_KINDS, EventKind, JuliusEvent

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class EventPublisher:
    """Manages per-kind handlers and delivers published events to them.

    Thread Safety:
        - Registration uses a lock
        - Handler lists are copied before iteration (lock released during callbacks)
        - No locks held during handler callbacks, so handlers may (un)subscribe

    Error Handling:
        - Each handler call is wrapped in try-except
        - Exceptions are logged and do not affect other handlers

    Signal kinds (STARTPROC, ENDPROC, STARTRECOG, ENDRECOG, RECOGFAIL) call
    their handlers with no arguments; every other kind passes the payload.

    Example:
        >>> publisher = EventPublisher()
        >>> publisher.subscribe(EventKind.RECOGOUT, print_best)
        >>> publisher.publish(JuliusEvent(EventKind.RECOGOUT, hypotheses))
    """

    def __init__(self, verbose: bool = False) -> None:
        """Initialize publisher.

        Args:
            verbose: Log subscription changes at info level
        """
        self._handlers: dict[EventKind, list[Handler]] = {}
        self._lock = threading.Lock()
        self._verbose = verbose

    def subscribe(self, kind: EventKind | str, handler: Handler) -> None:
        """Register a handler for one event kind.

        Idempotent: registering the same handler twice for a kind has no
        additional effect.

        Args:
            kind: Event kind (an EventKind or its string value).
            handler: Callable receiving the payload.

        Raises:
            ValueError: If kind is not a known event kind.
        """
        kind = EventKind(kind)
        with self._lock:
            handlers = self._handlers.setdefault(kind, [])
            if handler not in handlers:
                handlers.append(handler)
                if self._verbose:
                    logger.info("EventPublisher: handler registered for %s", kind.value)

    def unsubscribe(self, kind: EventKind | str, handler: Handler) -> None:
        """Remove a handler.  Removing an unknown handler is a no-op."""
        kind = EventKind(kind)
        with self._lock:
            handlers = self._handlers.get(kind, [])
            if handler in handlers:
                handlers.remove(handler)
                if self._verbose:
                    logger.info("EventPublisher: handler unregistered for %s", kind.value)

    def publish(self, event: JuliusEvent) -> None:
        """Deliver an event to every handler registered for its kind.

        Args:
            event: Decoded event.
        """
        with self._lock:
            handlers = list(self._handlers.get(event.kind, []))

        for handler in handlers:
            try:
                if event.kind in SIGNAL_KINDS:
                    handler()
                else:
                    handler(event.payload)
            except Exception:
                logger.exception(
                    "EventPublisher: handler %r failed on %s", handler, event.kind.value
                )

    def wait_for(self, kind: EventKind | str) -> "asyncio.Future[Any]":
        """Register a one-shot wait for the next event of a kind.

        Must be called from a coroutine running on the loop that publishes.
        The wait is registered before this method returns, so an event
        published right afterwards resolves it.

        Args:
            kind: Event kind to wait for.

        Returns:
            Future resolved with the payload (None for signal kinds).
            Cancelling the future removes the registration.
        """
        kind = EventKind(kind)
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()

        def resolve(payload: Any = None) -> None:
            self.unsubscribe(kind, resolve)
            if not future.done():
                future.set_result(payload)

        def on_done(_: asyncio.Future) -> None:
            self.unsubscribe(kind, resolve)

        self.subscribe(kind, resolve)
        future.add_done_callback(on_done)
        return future

    def subscriber_count(self, kind: EventKind | str | None = None) -> int:
        """Number of registered handlers, for one kind or overall."""
        with self._lock:
            if kind is None:
                return sum(len(handlers) for handlers in self._handlers.values())
            return len(self._handlers.get(EventKind(kind), []))
