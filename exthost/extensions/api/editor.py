"""
Active editor access for extensions.
"""

from typing import Any, Callable, Optional

from ...services.editor import CursorPosition, EditorSelection, EditorState, FindOptions
from ..permissions import Permission
from .base import Disposable, Facade


class EditorAPI(Facade):

    @property
    def _editor(self):
        return self._services.editor

    def get_active_editor(self) -> Optional[EditorState]:
        self._require(Permission.EDITOR_READ)
        return self._editor.get_active_editor()

    def get_selection(self) -> Optional[EditorSelection]:
        self._require(Permission.EDITOR_READ)
        return self._editor.get_selection()

    def get_current_line(self) -> str:
        self._require(Permission.EDITOR_READ)
        return self._editor.get_current_line()

    def get_cursor_position(self) -> CursorPosition:
        self._require(Permission.EDITOR_READ)
        return self._editor.get_cursor_position()

    def on_text_change(self, callback: Callable[..., Any]) -> Disposable:
        self._require(Permission.EDITOR_READ)
        return self._subscribe("editor:text:changed", callback)

    def on_cursor_change(self, callback: Callable[..., Any]) -> Disposable:
        self._require(Permission.EDITOR_READ)
        return self._subscribe("editor:cursor:changed", callback)

    async def execute_command(self, command: str, *args: Any) -> Any:
        self._require(Permission.EDITOR_WRITE)
        return await self._editor.execute_command(command, *args)

    async def insert_text(self, text: str) -> None:
        self._require(Permission.EDITOR_WRITE)
        self._editor.insert_text(text)

    async def set_selection(self, selection: EditorSelection) -> None:
        self._require(Permission.EDITOR_WRITE)
        self._editor.set_selection(selection)

    async def format(self) -> bool:
        self._require(Permission.EDITOR_WRITE)
        return self._editor.format()

    async def find_replace(self, find: str, replace: str, options: Optional[FindOptions] = None) -> bool:
        self._require(Permission.EDITOR_WRITE)
        return self._editor.find_replace(find, replace, options)
