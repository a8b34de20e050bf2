import asyncio
import inspect
import logging
from collections.abc import Callable
from enum import Enum
from typing import Any, Generic, Self, TypeVar

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)
Listener = Callable[[Any], Any]


class TypedEventEmitter(Generic[E]):
    """Listener registry over a closed enum of event names.

    Listeners run synchronously in registration order. A failing listener is
    logged and skipped; it never stops the others or reaches the emitter's
    caller. Awaitables returned by listeners are scheduled on the running
    event loop and not awaited.
    """

    def __init__(self, events: type[E]):
        self._events = events
        self._listeners: dict[E, list[Listener]] = {}
        self._pending: set[asyncio.Future] = set()

    def _event(self, event: E | str) -> E:
        return self._events(event)

    def on(self, event: E | str, listener: Listener) -> Self:
        self._listeners.setdefault(self._event(event), []).append(listener)
        return self

    def off(self, event: E | str, listener: Listener) -> Self:
        """Remove the most recently added registration of ``listener``."""
        registered = self._listeners.get(self._event(event), [])
        for index in range(len(registered) - 1, -1, -1):
            if registered[index] == listener:
                del registered[index]
                break
        return self

    def remove_all_listeners(self, event: E | str | None = None) -> Self:
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(self._event(event), None)
        return self

    def listeners(self, event: E | str) -> list[Listener]:
        return list(self._listeners.get(self._event(event), []))

    def listener_count(self, event: E | str) -> int:
        return len(self._listeners.get(self._event(event), []))

    def emit(self, event: E | str, payload: Any) -> bool:
        """Invoke every listener for ``event``. Returns False if there were none."""
        event = self._event(event)
        registered = list(self._listeners.get(event, []))
        for listener in registered:
            try:
                result = listener(payload)
            except Exception:
                logger.exception("Listener %r failed handling %s", listener, event.value)
                continue
            if inspect.isawaitable(result):
                self._schedule(result, event)
        return bool(registered)

    def _schedule(self, awaitable: Any, event: E) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; dropping async listener result for %s", event.value)
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return
        future = asyncio.ensure_future(awaitable, loop=loop)
        self._pending.add(future)
        future.add_done_callback(self._finished)

    def _finished(self, future: asyncio.Future) -> None:
        self._pending.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Async listener failed", exc_info=exc)
