"""
Bookkeeping of everything an extension registers with the host.

Every record carries the name of the extension that owns it, and every
cleanup routine removes records whose owner equals the given name exactly.
Composite keys such as ``"a:run"`` are never prefix-matched, so cleaning up
extension ``a`` leaves the registrations of extension ``ab`` alone.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional


def command_key(extension_name: str, command_id: str) -> str:
    return f"{extension_name}:{command_id}"


@dataclass
class CommandRegistration:
    """A command handler contributed by an extension."""
    extension: str
    command_id: str
    title: str
    handler: Callable[..., Any]
    registered_at: datetime = field(default_factory=datetime.now)

    @property
    def key(self) -> str:
        return command_key(self.extension, self.command_id)


@dataclass
class KeybindingRegistration:
    """A key chord bound to a namespaced command."""
    extension: str
    key: str
    command: str


@dataclass
class StatusBarItem:
    """Text shown in the status bar on behalf of an extension."""
    extension: str
    item_id: str
    text: str
    tooltip: Optional[str] = None

    @property
    def key(self) -> str:
        return command_key(self.extension, self.item_id)


class ResourceTracker:
    """Per-extension registry of commands, keybindings, status-bar items,
    webviews, event subscriptions and timers."""

    def __init__(self):
        self.commands: Dict[str, CommandRegistration] = {}
        self.keybindings: Dict[str, List[KeybindingRegistration]] = {}
        self.status_bar_items: Dict[str, StatusBarItem] = {}
        self.webviews: Dict[str, Any] = {}
        self.subscriptions: Dict[str, List[Any]] = {}
        self.timers: Dict[str, List[Any]] = {}
        self.logger = logging.getLogger("exthost.resources")

    # Registration

    def add_command(self, registration: CommandRegistration) -> None:
        if registration.key in self.commands:
            self.logger.warning(f"Command '{registration.key}' already registered, overwriting")
        self.commands[registration.key] = registration

    def get_command(self, extension_name: str, command_id: str) -> Optional[CommandRegistration]:
        return self.commands.get(command_key(extension_name, command_id))

    def add_keybinding(self, registration: KeybindingRegistration) -> None:
        self.keybindings.setdefault(registration.extension, []).append(registration)

    def add_status_bar_item(self, item: StatusBarItem) -> None:
        self.status_bar_items[item.key] = item

    def add_webview(self, webview: Any) -> None:
        self.webviews[webview.id] = webview

    def add_subscription(self, extension_name: str, subscription: Any) -> None:
        self.subscriptions.setdefault(extension_name, []).append(subscription)

    def discard_subscription(self, extension_name: str, subscription: Any) -> None:
        subscriptions = self.subscriptions.get(extension_name)
        if not subscriptions:
            return
        if subscription in subscriptions:
            subscriptions.remove(subscription)
        if not subscriptions:
            del self.subscriptions[extension_name]

    def add_timer(self, extension_name: str, handle: Any) -> None:
        self.timers.setdefault(extension_name, []).append(handle)

    def discard_timer(self, extension_name: str, handle: Any) -> None:
        timers = self.timers.get(extension_name)
        if not timers:
            return
        if handle in timers:
            timers.remove(handle)
        if not timers:
            del self.timers[extension_name]

    # Cleanup

    def cleanup_commands(self, extension_name: str) -> int:
        keys = [key for key, reg in self.commands.items() if reg.extension == extension_name]
        for key in keys:
            del self.commands[key]
        return len(keys)

    def cleanup_keybindings(self, extension_name: str) -> int:
        removed = self.keybindings.pop(extension_name, [])
        return len(removed)

    def cleanup_status_bar_items(self, extension_name: str) -> int:
        keys = [key for key, item in self.status_bar_items.items() if item.extension == extension_name]
        for key in keys:
            del self.status_bar_items[key]
        return len(keys)

    def cleanup_webviews(self, extension_name: str) -> int:
        ids = [wid for wid, webview in self.webviews.items() if webview.extension == extension_name]
        for wid in ids:
            webview = self.webviews.pop(wid)
            try:
                webview.dispose()
            except Exception as e:
                self.logger.error(f"Failed to dispose webview {wid} of {extension_name}: {e}")
        return len(ids)

    def cleanup_events(self, extension_name: str) -> int:
        """Dispose event subscriptions and cancel timers."""
        removed = 0

        for subscription in self.subscriptions.pop(extension_name, []):
            try:
                subscription.dispose()
            except Exception as e:
                self.logger.error(f"Failed to remove listener of {extension_name}: {e}")
            removed += 1

        for handle in self.timers.pop(extension_name, []):
            try:
                handle.cancel()
            except Exception as e:
                self.logger.error(f"Failed to cancel timer of {extension_name}: {e}")
            removed += 1

        return removed

    def cleanup_all(self, extension_name: str) -> Dict[str, int]:
        """Run every cleanup routine for one extension."""
        summary = {
            "events": self.cleanup_events(extension_name),
            "webviews": self.cleanup_webviews(extension_name),
            "commands": self.cleanup_commands(extension_name),
            "keybindings": self.cleanup_keybindings(extension_name),
            "status_bar_items": self.cleanup_status_bar_items(extension_name),
        }
        if any(summary.values()):
            self.logger.debug(f"Cleaned up resources for {extension_name}: {summary}")
        return summary

    # Inspection

    def owned_by(self, extension_name: str) -> Dict[str, int]:
        return {
            "commands": sum(1 for r in self.commands.values() if r.extension == extension_name),
            "keybindings": len(self.keybindings.get(extension_name, [])),
            "status_bar_items": sum(1 for i in self.status_bar_items.values() if i.extension == extension_name),
            "webviews": sum(1 for w in self.webviews.values() if w.extension == extension_name),
            "subscriptions": len(self.subscriptions.get(extension_name, [])),
            "timers": len(self.timers.get(extension_name, [])),
        }

    def is_empty(self, extension_name: Optional[str] = None) -> bool:
        """True if nothing is tracked for the extension (or for anyone)."""
        if extension_name is None:
            return not (self.commands or self.keybindings or self.status_bar_items
                        or self.webviews or self.subscriptions or self.timers)
        return not any(self.owned_by(extension_name).values())
