"""
In-memory model of the active editor document.

The real editor lives in the UI; the host keeps a mirror of the active
document so extensions can read and edit it through the editor facade.
"""

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Optional

from ..extensions.errors import NotFoundError


@dataclass(frozen=True)
class CursorPosition:
    line: int = 0
    column: int = 0


@dataclass(frozen=True)
class EditorSelection:
    start: CursorPosition
    end: CursorPosition

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


@dataclass
class EditorState:
    path: str
    text: str = ""
    language: Optional[str] = None
    cursor: CursorPosition = field(default_factory=CursorPosition)
    selection: Optional[EditorSelection] = None


@dataclass
class TextChangeEvent:
    path: str
    offset: int
    removed: str
    inserted: str


@dataclass
class FindOptions:
    regex: bool = False
    case_sensitive: bool = True
    whole_word: bool = False
    replace_all: bool = True


def position_to_offset(text: str, position: CursorPosition) -> int:
    lines = text.split("\n")
    line = max(0, min(position.line, len(lines) - 1))
    column = max(0, min(position.column, len(lines[line])))
    return sum(len(l) + 1 for l in lines[:line]) + column


def offset_to_position(text: str, offset: int) -> CursorPosition:
    offset = max(0, min(offset, len(text)))
    before = text[:offset]
    line = before.count("\n")
    column = offset - (before.rfind("\n") + 1)
    return CursorPosition(line, column)


class EditorService:
    """Active document mirror with editing primitives."""

    def __init__(self, events=None):
        self.events = events
        self._state: Optional[EditorState] = None
        self.logger = logging.getLogger("exthost.services.editor")
        self._commands: Dict[str, Callable[..., Any]] = {
            "select_all": self._select_all,
            "cursor_top": lambda: self.set_cursor(CursorPosition(0, 0)),
            "cursor_bottom": lambda: self.set_cursor(self._end_position()),
            "delete_line": self._delete_line,
        }

    # Document lifecycle

    def open_document(self, path: str, text: str, language: Optional[str] = None) -> EditorState:
        self._state = EditorState(path=path, text=text, language=language)
        self._emit("editor:opened", path)
        return self.get_active_editor()

    def close_document(self) -> None:
        if self._state is not None:
            path = self._state.path
            self._state = None
            self._emit("editor:closed", path)

    def get_active_editor(self) -> Optional[EditorState]:
        return replace(self._state) if self._state else None

    # Reading

    def get_selection(self) -> Optional[EditorSelection]:
        return self._state.selection if self._state else None

    def get_cursor_position(self) -> CursorPosition:
        return self._state.cursor if self._state else CursorPosition()

    def get_current_line(self) -> str:
        if not self._state:
            return ""
        lines = self._state.text.split("\n")
        return lines[min(self._state.cursor.line, len(lines) - 1)]

    # Editing

    def insert_text(self, text: str) -> None:
        state = self._require_state()
        selection = state.selection
        if selection and not selection.is_empty:
            start = position_to_offset(state.text, selection.start)
            end = position_to_offset(state.text, selection.end)
            start, end = min(start, end), max(start, end)
        else:
            start = end = position_to_offset(state.text, state.cursor)

        self._replace_range(start, end, text)
        state.selection = None
        self.set_cursor(offset_to_position(state.text, start + len(text)))

    def set_selection(self, selection: EditorSelection) -> None:
        state = self._require_state()
        state.selection = selection
        self.set_cursor(selection.end)

    def set_cursor(self, position: CursorPosition) -> None:
        state = self._require_state()
        state.cursor = position
        self._emit("editor:cursor:changed", position)

    def format(self) -> bool:
        """Strip trailing whitespace and end the document with one newline."""
        state = self._require_state()
        lines = [line.rstrip() for line in state.text.split("\n")]
        formatted = "\n".join(lines).rstrip("\n") + "\n"
        if formatted == state.text:
            return False
        self._replace_range(0, len(state.text), formatted)
        return True

    def find_replace(self, find: str, replacement: str, options: Optional[FindOptions] = None) -> bool:
        state = self._require_state()
        options = options or FindOptions()

        pattern = find if options.regex else re.escape(find)
        if options.whole_word:
            pattern = rf"\b{pattern}\b"
        flags = 0 if options.case_sensitive else re.IGNORECASE

        count = 0 if options.replace_all else 1
        if not options.regex:
            replacement = replacement.replace("\\", "\\\\")
        new_text, replaced = re.subn(pattern, replacement, state.text, count=count, flags=flags)
        if not replaced:
            return False

        self._replace_range(0, len(state.text), new_text)
        return True

    async def execute_command(self, command: str, *args: Any) -> Any:
        handler = self._commands.get(command)
        if handler is None:
            raise NotFoundError(f"Unknown editor command: {command}")
        return handler(*args)

    # Internals

    def _require_state(self) -> EditorState:
        if self._state is None:
            raise RuntimeError("No active editor")
        return self._state

    def _replace_range(self, start: int, end: int, text: str) -> None:
        state = self._require_state()
        removed = state.text[start:end]
        state.text = state.text[:start] + text + state.text[end:]
        self._emit("editor:text:changed", TextChangeEvent(state.path, start, removed, text))

    def _end_position(self) -> CursorPosition:
        state = self._require_state()
        return offset_to_position(state.text, len(state.text))

    def _select_all(self) -> None:
        self.set_selection(EditorSelection(CursorPosition(0, 0), self._end_position()))

    def _delete_line(self) -> None:
        state = self._require_state()
        lines = state.text.split("\n")
        line = min(state.cursor.line, len(lines) - 1)
        start = position_to_offset(state.text, CursorPosition(line, 0))
        end = start + len(lines[line]) + (1 if line < len(lines) - 1 else 0)
        self._replace_range(start, end, "")
        self.set_cursor(CursorPosition(min(line, len(state.text.split("\n")) - 1), 0))

    def _emit(self, event: str, *args: Any) -> None:
        if self.events is not None:
            self.events.emit(event, *args)
