"""
UI contributions for extensions: notifications, dialogs, commands,
keybindings, webviews and status-bar items.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from ...services.ui import InputOptions, QuickPickItem, QuickPickOptions
from ..permissions import Permission
from .base import Facade


NOTIFICATION_TYPES = ("info", "success", "warning", "error")


@dataclass
class WebviewOptions:
    title: str
    html: str = ""
    allow_scripts: bool = False


class WebviewHandle:
    """A webview owned by one extension. Every action is published on the bus."""

    def __init__(self, webview_id: str, extension: str, options: WebviewOptions, events, resources):
        self.id = webview_id
        self.extension = extension
        self.options = options
        self.visible = False
        self.disposed = False
        self._events = events
        self._resources = resources

    def show(self) -> None:
        self.visible = True
        self._events.emit("ui:webview:show", self.id, self.options)

    def hide(self) -> None:
        self.visible = False
        self._events.emit("ui:webview:hide", self.id)

    def post_message(self, message: Any) -> None:
        self._events.emit("ui:webview:message", self.id, message)

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        self.visible = False
        self._resources.webviews.pop(self.id, None)
        self._events.emit("ui:webview:dispose", self.id)

    def __repr__(self) -> str:
        return f"<WebviewHandle {self.id} extension={self.extension!r}>"


class UIAPI(Facade):

    @property
    def _bridge(self):
        return self._services.ui

    def show_notification(self, message: str, type: str = "info") -> None:
        self._require(Permission.UI_RENDER)
        if type not in NOTIFICATION_TYPES:
            type = "info"
        self._host.show_notification(self.extension_name, message, type)

    async def show_input_dialog(self, title: str, options: Optional[InputOptions] = None) -> Optional[str]:
        self._require(Permission.UI_RENDER)
        return await self._bridge.show_input(title, options)

    async def show_confirmation_dialog(self, title: str, message: str) -> bool:
        self._require(Permission.UI_RENDER)
        return await self._bridge.confirm(title, message)

    async def show_quick_pick(self, items: List[QuickPickItem],
                              options: Optional[QuickPickOptions] = None) -> Optional[QuickPickItem]:
        self._require(Permission.UI_RENDER)
        return await self._bridge.quick_pick(items, options)

    def register_command(self, command_id: str, title: str, handler: Callable[..., Any]) -> None:
        self._require(Permission.UI_COMMAND)
        self._host.register_command(self.extension_name, command_id, title, handler)

    def register_keybinding(self, key: str, command: str) -> None:
        self._require(Permission.UI_SHORTCUT)
        self._host.register_keybinding(self.extension_name, key, f"{self.extension_name}:{command}")

    async def create_webview(self, options: WebviewOptions) -> WebviewHandle:
        self._require(Permission.UI_RENDER)
        webview_id = f"{self.extension_name}_webview_{uuid.uuid4().hex[:8]}"
        webview = WebviewHandle(webview_id, self.extension_name, options,
                                self._events, self._host.resources)
        self._host.resources.add_webview(webview)
        return webview

    def update_status_bar_item(self, item_id: str, text: str, tooltip: Optional[str] = None) -> None:
        self._require(Permission.UI_RENDER)
        self._host.register_status_bar_item(self.extension_name, item_id, text, tooltip)
