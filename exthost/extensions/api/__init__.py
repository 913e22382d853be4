"""
Permission-checked API surface handed to extensions.
"""

from dataclasses import dataclass

from .ai import AIAPI, AIMessage, ChatOptions, CodeAnalysis, Completion
from .base import Disposable, Facade
from .config import ConfigAPI
from .editor import EditorAPI
from .events import EventsAPI
from .git import GitAPI
from .http import HTTPAPI
from .logger import LoggerAPI
from .storage import StorageAPI
from .terminal import TerminalAPI
from .ui import UIAPI, WebviewHandle, WebviewOptions
from .workspace import FileChangeEvent, SearchOptions, SearchResult, WorkspaceAPI


@dataclass(frozen=True)
class ExtensionAPI:
    """One facade per capability domain, all bound to the same extension."""
    workspace: WorkspaceAPI
    editor: EditorAPI
    terminal: TerminalAPI
    ai: AIAPI
    git: GitAPI
    ui: UIAPI
    storage: StorageAPI
    config: ConfigAPI
    events: EventsAPI
    http: HTTPAPI
    logger: LoggerAPI


def create_extension_api(host, extension_name: str) -> ExtensionAPI:
    """Mint the facade bundle for ``extension_name``."""
    return ExtensionAPI(
        workspace=WorkspaceAPI(host, extension_name),
        editor=EditorAPI(host, extension_name),
        terminal=TerminalAPI(host, extension_name),
        ai=AIAPI(host, extension_name),
        git=GitAPI(host, extension_name),
        ui=UIAPI(host, extension_name),
        storage=StorageAPI(host, extension_name),
        config=ConfigAPI(host, extension_name),
        events=EventsAPI(host, extension_name),
        http=HTTPAPI(host, extension_name),
        logger=LoggerAPI(host, extension_name),
    )


__all__ = [
    "AIAPI",
    "AIMessage",
    "ChatOptions",
    "CodeAnalysis",
    "Completion",
    "ConfigAPI",
    "Disposable",
    "EditorAPI",
    "EventsAPI",
    "ExtensionAPI",
    "Facade",
    "FileChangeEvent",
    "GitAPI",
    "HTTPAPI",
    "LoggerAPI",
    "SearchOptions",
    "SearchResult",
    "StorageAPI",
    "TerminalAPI",
    "UIAPI",
    "WebviewHandle",
    "WebviewOptions",
    "WorkspaceAPI",
    "create_extension_api",
]
