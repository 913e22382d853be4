"""
Hello World extension - demonstrates the extension API.
"""

from datetime import datetime

from exthost.extensions import ExtensionLifecycle

STATUS_ITEM = "hello-world-status"


class Extension(ExtensionLifecycle):
    """Greets the user and shows a few workspace facts."""

    async def on_load(self) -> None:
        self.context.logger.info("Hello World Extension: Loading...")
        self.context.logger.info(f"Extension ID: {self.context.extension_id}")

    async def on_activate(self) -> None:
        ui = self.context.ui
        ui.register_command("show-message", "Hello World: Show Greeting", self.show_message)
        ui.register_command("list-files", "Hello World: List Files", self.list_files)
        ui.register_command("git-status", "Hello World: Git Status", self.git_status)
        ui.register_command("set-name", "Hello World: Set Name", self.set_name)
        ui.register_keybinding("ctrl+shift+h", "show-message")

        self._update_status_bar()
        self.context.events.on("workspace:file:changed", self._on_file_changed)
        self.context.events.call_every(30, self._update_status_bar)

        ui.show_notification("Hello World Extension activated!", "success")

    async def on_deactivate(self) -> None:
        self.context.logger.info("Hello World Extension: Deactivated")

    async def on_config_change(self, config) -> None:
        self.context.logger.info(f"New configuration: {config}")
        self._update_status_bar()

    async def show_message(self) -> str:
        config = self.context.config
        message = f"{config.get('greeting', 'Hello')}, {config.get('name', 'Developer')}! {config.get('customMessage', '')}".strip()
        self.context.ui.show_notification(message, "info")
        return message

    async def list_files(self, path: str = ".") -> list:
        items = await self.context.workspace.list_directory(path)
        return [item.name for item in items]

    async def git_status(self) -> dict:
        status = await self.context.git.get_status()
        return {
            "branch": status.branch,
            "staged": len(status.staged),
            "modified": len(status.modified),
            "untracked": len(status.untracked),
        }

    async def set_name(self, name: str) -> str:
        await self.context.api.config.set_extension("name", name)
        return name

    def _on_file_changed(self, change) -> None:
        self.context.logger.info(f"File changed: {change.path}")

    def _update_status_bar(self) -> None:
        greeting = self.context.config.get("greeting", "Hello")
        self.context.ui.update_status_bar_item(
            STATUS_ITEM,
            f"{greeting}! {datetime.now():%H:%M}",
            "Hello World Extension - run show-message to greet",
        )
