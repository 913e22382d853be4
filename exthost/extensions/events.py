"""
Publish/subscribe channel shared by the host and its extensions.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, List, Optional, Set


Listener = Callable[..., Any]


class Subscription:
    """Disposable handle returned by ``EventBus.on`` and ``EventBus.once``."""

    def __init__(self, bus: "EventBus", event: str, callback: Listener, once: bool = False):
        self.bus = bus
        self.event = event
        self.callback = callback
        self.once = once
        self.disposed = False

    def dispose(self) -> None:
        """Remove the listener. Safe to call more than once."""
        if self.disposed:
            return
        self.disposed = True
        self.bus._remove(self)

    def __call__(self) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self.disposed else "live"
        return f"<Subscription {self.event!r} {state}>"


class EventBus:
    """
    Named-event publish/subscribe channel.

    Listeners run synchronously in subscription order. A listener that
    returns an awaitable has it scheduled on the running loop. Exceptions
    raised by one listener are logged and do not prevent delivery to the
    others.
    """

    def __init__(self):
        self._subscriptions: Dict[str, List[Subscription]] = {}
        self._pending: Set[asyncio.Future] = set()
        self.logger = logging.getLogger("exthost.events")

    def on(self, event: str, callback: Listener) -> Subscription:
        subscription = Subscription(self, event, callback)
        self._subscriptions.setdefault(event, []).append(subscription)
        return subscription

    def once(self, event: str, callback: Listener) -> Subscription:
        subscription = Subscription(self, event, callback, once=True)
        self._subscriptions.setdefault(event, []).append(subscription)
        return subscription

    def off(self, event: str, callback: Listener) -> bool:
        """Remove the first subscription of ``callback`` to ``event``."""
        for subscription in self._subscriptions.get(event, []):
            if subscription.callback is callback:
                subscription.dispose()
                return True
        return False

    def emit(self, event: str, *args: Any) -> int:
        """Deliver an event; returns the number of listeners invoked."""
        subscriptions = list(self._subscriptions.get(event, []))
        delivered = 0

        for subscription in subscriptions:
            if subscription.disposed:
                continue
            if subscription.once:
                subscription.dispose()

            try:
                result = subscription.callback(*args)
                if inspect.isawaitable(result):
                    self._schedule(event, result)
            except Exception as e:
                self.logger.error(f"Listener for '{event}' failed: {e}")
            delivered += 1

        return delivered

    async def emit_async(self, event: str, *args: Any) -> int:
        """Deliver an event and await coroutine listeners in order."""
        subscriptions = list(self._subscriptions.get(event, []))
        delivered = 0

        for subscription in subscriptions:
            if subscription.disposed:
                continue
            if subscription.once:
                subscription.dispose()

            try:
                result = subscription.callback(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self.logger.error(f"Listener for '{event}' failed: {e}")
            delivered += 1

        return delivered

    def remove_all_listeners(self, event: Optional[str] = None) -> None:
        if event is None:
            events = list(self._subscriptions)
        else:
            events = [event]

        for name in events:
            for subscription in list(self._subscriptions.get(name, [])):
                subscription.dispose()

    def listener_count(self, event: str) -> int:
        return len(self._subscriptions.get(event, []))

    def event_names(self) -> List[str]:
        return [name for name, subs in self._subscriptions.items() if subs]

    def _remove(self, subscription: Subscription) -> None:
        subscriptions = self._subscriptions.get(subscription.event)
        if not subscriptions:
            return
        try:
            subscriptions.remove(subscription)
        except ValueError:
            pass
        if not subscriptions:
            del self._subscriptions[subscription.event]

    def _schedule(self, event: str, awaitable) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.logger.warning(f"No running loop for async listener of '{event}', dropping it")
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return

        future = asyncio.ensure_future(awaitable, loop=loop)
        self._pending.add(future)

        def _done(fut: asyncio.Future) -> None:
            self._pending.discard(fut)
            if not fut.cancelled() and fut.exception() is not None:
                self.logger.error(f"Async listener for '{event}' failed: {fut.exception()}")

        future.add_done_callback(_done)

    async def drain(self) -> None:
        """Wait for scheduled async listeners to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
