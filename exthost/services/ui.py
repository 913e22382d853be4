"""
Bridge between the ui facade and whatever front end is attached.
"""

import asyncio
from dataclasses import dataclass
from typing import List, Optional

from rich.console import Console
from rich.prompt import Confirm, Prompt


@dataclass
class InputOptions:
    prompt: str = ""
    placeholder: str = ""
    value: str = ""
    password: bool = False


@dataclass
class QuickPickItem:
    label: str
    description: str = ""
    detail: str = ""


@dataclass
class QuickPickOptions:
    title: str = ""
    placeholder: str = ""


NOTIFICATION_STYLES = {
    "info": "blue",
    "success": "green",
    "warning": "yellow",
    "error": "red",
}


class UIBridge:
    """Headless bridge: dialogs are dismissed and notifications dropped."""

    async def notify(self, extension_name: str, message: str, type: str = "info") -> None:
        pass

    async def show_input(self, title: str, options: Optional[InputOptions] = None) -> Optional[str]:
        return None

    async def confirm(self, title: str, message: str) -> bool:
        return False

    async def quick_pick(self, items: List[QuickPickItem],
                         options: Optional[QuickPickOptions] = None) -> Optional[QuickPickItem]:
        return None


class ConsoleUIBridge(UIBridge):
    """Terminal front end built on rich prompts."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    async def notify(self, extension_name: str, message: str, type: str = "info") -> None:
        style = NOTIFICATION_STYLES.get(type, "white")
        self.console.print(f"[{style}][{extension_name}][/{style}] {message}")

    async def show_input(self, title: str, options: Optional[InputOptions] = None) -> Optional[str]:
        options = options or InputOptions()
        answer = await asyncio.to_thread(
            Prompt.ask,
            f"[bold cyan]{title}[/bold cyan]",
            default=options.value or None,
            password=options.password,
            console=self.console,
        )
        return answer or None

    async def confirm(self, title: str, message: str) -> bool:
        return await asyncio.to_thread(
            Confirm.ask, f"[bold]{title}[/bold] {message}", console=self.console
        )

    async def quick_pick(self, items: List[QuickPickItem],
                         options: Optional[QuickPickOptions] = None) -> Optional[QuickPickItem]:
        if not items:
            return None
        options = options or QuickPickOptions()
        if options.title:
            self.console.print(f"[bold]{options.title}[/bold]")
        for index, item in enumerate(items, 1):
            suffix = f" [dim]{item.description}[/dim]" if item.description else ""
            self.console.print(f"  {index}. {item.label}{suffix}")

        choice = await asyncio.to_thread(
            Prompt.ask,
            options.placeholder or "Select",
            choices=[str(i) for i in range(1, len(items) + 1)],
            console=self.console,
        )
        return items[int(choice) - 1]
