"""
Common plumbing for the per-extension API facades.
"""

from typing import Any, Callable, List, Optional


class Disposable:
    """Handle that runs its teardown callbacks once."""

    def __init__(self, *callbacks: Callable[[], Any], event: Optional[str] = None):
        self._callbacks: List[Callable[[], Any]] = list(callbacks)
        self.event = event
        self.disposed = False

    def add(self, callback: Callable[[], Any]) -> None:
        self._callbacks.append(callback)

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        for callback in self._callbacks:
            callback()

    def __call__(self) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self.disposed else "live"
        return f"<Disposable {self.event or '-'} {state}>"


class Facade:
    """
    Capability facade bound to one extension.

    Subclasses start every public method with ``self._require(...)`` so the
    permission check runs before any side effect. Calling ``_require()``
    without tokens still fails when the extension holds no grant at all.
    """

    def __init__(self, host: Any, extension_name: str):
        self._host = host
        self.extension_name = extension_name

    @property
    def _services(self):
        return self._host.services

    @property
    def _events(self):
        return self._host.events

    def _require(self, *permissions) -> None:
        self._host.permissions.check(self.extension_name, permissions)

    def _subscribe(self, event: str, callback: Callable[..., Any], once: bool = False) -> Disposable:
        """Subscribe on the host bus and record the handle for cleanup."""
        handle: Optional[Disposable] = None

        def _listener(*args):
            if once:
                handle.dispose()
            return callback(*args)

        subscription = self._events.on(event, _listener)
        handle = self._track(subscription.dispose, event=event)
        return handle

    def _track(self, *teardown: Callable[[], Any], event: Optional[str] = None) -> Disposable:
        resources = self._host.resources
        handle = Disposable(*teardown, event=event)
        handle.add(lambda: resources.discard_subscription(self.extension_name, handle))
        resources.add_subscription(self.extension_name, handle)
        return handle

    def __repr__(self) -> str:
        return f"<{type(self).__name__} extension={self.extension_name!r}>"
