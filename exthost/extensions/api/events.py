"""
Event bus and timer access for extensions.

Every listener and timer created here is recorded against the calling
extension and removed when it is deactivated.
"""

import asyncio
import inspect
from typing import Any, Callable, Optional

from .base import Disposable, Facade


class EventsAPI(Facade):

    def emit(self, event: str, *args: Any) -> int:
        self._require()
        return self._events.emit(event, *args)

    def on(self, event: str, callback: Callable[..., Any]) -> Disposable:
        self._require()
        return self._subscribe(event, callback)

    def once(self, event: str, callback: Callable[..., Any]) -> Disposable:
        self._require()
        return self._subscribe(event, callback, once=True)

    def remove_all_listeners(self, event: Optional[str] = None) -> int:
        """Remove this extension's listeners, for one event or for all of them."""
        self._require()
        handles = list(self._host.resources.subscriptions.get(self.extension_name, []))
        removed = 0
        for handle in handles:
            if handle.event is None or (event is not None and handle.event != event):
                continue
            handle.dispose()
            removed += 1
        return removed

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> asyncio.TimerHandle:
        """Run ``callback`` once after ``delay`` seconds."""
        self._require()
        resources = self._host.resources
        loop = asyncio.get_running_loop()
        handle: Optional[asyncio.TimerHandle] = None

        def _fire():
            resources.discard_timer(self.extension_name, handle)
            self._invoke(callback, *args)

        handle = loop.call_later(delay, _fire)
        resources.add_timer(self.extension_name, handle)
        return handle

    def call_every(self, interval: float, callback: Callable[..., Any], *args: Any) -> asyncio.Task:
        """Run ``callback`` every ``interval`` seconds until cancelled."""
        self._require()

        async def _repeat():
            while True:
                await asyncio.sleep(interval)
                try:
                    result = callback(*args)
                    if inspect.isawaitable(result):
                        await result
                except Exception as e:
                    self._host.logger.error(f"Timer of {self.extension_name} failed: {e}")

        task = asyncio.get_running_loop().create_task(_repeat())
        self._host.resources.add_timer(self.extension_name, task)
        return task

    def _invoke(self, callback: Callable[..., Any], *args: Any) -> None:
        try:
            result = callback(*args)
        except Exception as e:
            self._host.logger.error(f"Timer of {self.extension_name} failed: {e}")
            return
        if inspect.isawaitable(result):
            self._events._schedule(f"timer:{self.extension_name}", result)
