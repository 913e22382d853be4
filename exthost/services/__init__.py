"""
Host-side services the extension facades delegate to.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from .ai import AIProvider, StaticProvider
from .editor import EditorService
from .filesystem import ScopedFileSystem, WorkspaceItem
from .git import GitService
from .http import HttpClient, HTTPResponse
from .settings import SettingsStore
from .storage import JsonFileStorage
from .terminal import TerminalService
from .ui import ConsoleUIBridge, UIBridge


@dataclass
class HostServices:
    """Collaborators injected into an ``ExtensionHost``."""
    filesystem: ScopedFileSystem
    http: HttpClient = field(default_factory=HttpClient)
    storage: JsonFileStorage = field(default_factory=JsonFileStorage)
    settings: SettingsStore = field(default_factory=SettingsStore)
    editor: EditorService = field(default_factory=EditorService)
    terminal: Optional[TerminalService] = None
    git: Optional[GitService] = None
    ai: Optional[AIProvider] = None
    ui: UIBridge = field(default_factory=UIBridge)

    def __post_init__(self):
        root = self.filesystem.root
        if self.terminal is None:
            self.terminal = TerminalService(root)
        if self.git is None:
            self.git = GitService(root)

    @classmethod
    def for_workspace(cls, workspace: Union[str, Path], **overrides) -> "HostServices":
        """Services rooted at ``workspace`` with in-memory storage."""
        return cls(filesystem=ScopedFileSystem(workspace), **overrides)

    @classmethod
    def from_config(cls, config, ui: Optional[UIBridge] = None,
                    ai: Optional[AIProvider] = None) -> "HostServices":
        workspace = config.workspace_path
        settings_file = Path(workspace) / ".exthost" / "settings.yaml"
        return cls(
            filesystem=ScopedFileSystem(workspace),
            http=HttpClient(timeout=config.get("http.timeout", 30.0)),
            storage=JsonFileStorage(config.storage_dir),
            settings=SettingsStore(config.get("settings", {}), workspace_file=settings_file),
            ai=ai,
            ui=ui or UIBridge(),
        )

    def bind_events(self, events) -> None:
        """Let event-producing services publish on the host bus."""
        self.editor.events = events
        self.terminal.events = events

    async def close(self) -> None:
        await self.http.close()


__all__ = [
    "AIProvider",
    "ConsoleUIBridge",
    "EditorService",
    "GitService",
    "HTTPResponse",
    "HostServices",
    "HttpClient",
    "JsonFileStorage",
    "ScopedFileSystem",
    "SettingsStore",
    "StaticProvider",
    "TerminalService",
    "UIBridge",
    "WorkspaceItem",
]
