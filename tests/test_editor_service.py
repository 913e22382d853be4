"""Tests for the in-process editor document model."""

import pytest

from exthost.extensions import EventBus, NotFoundError
from exthost.services.editor import (
    CursorPosition,
    EditorSelection,
    EditorService,
    FindOptions,
    offset_to_position,
    position_to_offset,
)


@pytest.fixture
def editor():
    service = EditorService(EventBus())
    service.open_document("main.py", "alpha\nbeta\ngamma", "python")
    return service


def test_offsets_round_trip_through_positions():
    text = "ab\ncd\n"
    assert position_to_offset(text, CursorPosition(1, 1)) == 4
    assert offset_to_position(text, 4) == CursorPosition(1, 1)
    assert position_to_offset(text, CursorPosition(9, 9)) == len(text)


def test_get_active_editor_returns_a_copy(editor):
    state = editor.get_active_editor()
    state.text = "changed"
    assert editor.get_active_editor().text == "alpha\nbeta\ngamma"


def test_no_document_open():
    service = EditorService()
    assert service.get_active_editor() is None
    assert service.get_current_line() == ""
    with pytest.raises(RuntimeError, match="No active editor"):
        service.insert_text("x")


def test_insert_replaces_selection(editor):
    changes = []
    editor.events.on("editor:text:changed", changes.append)

    editor.set_selection(EditorSelection(CursorPosition(1, 0), CursorPosition(1, 4)))
    editor.insert_text("BETA")

    assert editor.get_active_editor().text == "alpha\nBETA\ngamma"
    assert editor.get_selection() is None
    assert editor.get_cursor_position() == CursorPosition(1, 4)
    assert [(c.offset, c.removed, c.inserted) for c in changes] == [(6, "beta", "BETA")]


def test_format_strips_trailing_whitespace():
    service = EditorService()
    service.open_document("notes.txt", "a  \nb\t\n\n\n")
    assert service.format() is True
    assert service.get_active_editor().text == "a\nb\n"
    assert service.format() is False


def test_find_replace_options(editor):
    assert editor.find_replace("A", "o", FindOptions(case_sensitive=False, replace_all=False)) is True
    assert editor.get_active_editor().text == "olpha\nbeta\ngamma"

    assert editor.find_replace("ta", "X", FindOptions(whole_word=True)) is False
    assert editor.find_replace(r"m+", "M", FindOptions(regex=True)) is True
    assert editor.get_active_editor().text == "olpha\nbeta\ngaMa"


@pytest.mark.asyncio
async def test_builtin_commands(editor):
    editor.set_cursor(CursorPosition(1, 2))
    await editor.execute_command("delete_line")
    assert editor.get_active_editor().text == "alpha\ngamma"

    await editor.execute_command("select_all")
    assert editor.get_selection().end == CursorPosition(1, 5)

    with pytest.raises(NotFoundError):
        await editor.execute_command("fold_all")
