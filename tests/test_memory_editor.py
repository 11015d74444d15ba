from __future__ import annotations

import asyncio
from typing import List

import pytest

from helpers import make_editor

from buffer_bridge.host import (
    BUFFER_ENTER,
    INSERT_ENTER,
    TEXT_CHANGED,
    TEXT_CHANGED_INSERT,
    EditorEventBus,
    InMemoryEditor,
)


def record(bus: EditorEventBus, *names: str) -> List[str]:
    seen: List[str] = []
    for name in names:
        bus.subscribe(name, lambda _payload, name=name: seen.append(name))
    return seen


def test_open_and_switch_emit_buffer_enter() -> None:
    editor = InMemoryEditor()
    seen = record(editor.bus, BUFFER_ENTER)
    editor.open("a.py", "a", filetype="python")
    editor.open("b.py", "b", filetype="python")
    editor.switch_to("a.py")

    assert seen == [BUFFER_ENTER] * 3
    assert editor.buffer.lines() == ("a",)
    with pytest.raises(KeyError):
        editor.switch_to("missing.py")


def test_mutations_emit_mode_specific_events() -> None:
    editor = make_editor("one\ntwo")
    seen = record(editor.bus, TEXT_CHANGED, TEXT_CHANGED_INSERT, INSERT_ENTER)

    editor.delete_current_line()
    editor.enter_insert()
    editor.type_text("x")
    editor.backspace()
    editor.leave_insert()

    assert seen == [
        TEXT_CHANGED,
        INSERT_ENTER,
        TEXT_CHANGED_INSERT,
        TEXT_CHANGED_INSERT,
    ]


@pytest.mark.asyncio
async def test_identity_and_queries() -> None:
    editor = make_editor("let x = 1")
    cwd, file, filetype = await editor.identity()

    assert (file, filetype) == ("main.js", "javascript")
    assert cwd == editor.cwd
    assert await editor.current_line() == "let x = 1"
    assert await editor.changed_tick() == 0


@pytest.mark.asyncio
async def test_capture_returns_typed_text_and_rolls_back() -> None:
    editor = make_editor("let x = 1")
    editor.queue_input("renamed")
    tick = editor.buffer.changed_tick
    depth = editor.buffer.undo_timeline.depth

    typed = await editor.capture_input((1, 5))

    assert typed == "renamed"
    assert editor.buffer.lines() == ("let x = 1",)
    assert editor.buffer.undo_timeline.depth == depth
    assert editor.buffer.changed_tick > tick
    assert not editor.buffer.state.inserting
    assert editor.buffer.state.cursor == (1, 5)


@pytest.mark.asyncio
async def test_capture_shows_transient_edit_until_leave() -> None:
    editor = make_editor("let x = 1")
    task = asyncio.create_task(editor.capture_input((1, 5)))
    await asyncio.sleep(0)

    assert editor.buffer.lines() == ("let  = 1",)
    assert editor.buffer.state.inserting
    editor.type_text("abc")
    assert editor.buffer.lines() == ("let abc = 1",)
    editor.leave_insert()

    assert await task == "abc"
    assert editor.buffer.lines() == ("let x = 1",)


@pytest.mark.asyncio
async def test_cancelled_capture_still_rolls_back() -> None:
    editor = make_editor("let x = 1")
    task = asyncio.create_task(editor.capture_input((1, 5)))
    await asyncio.sleep(0)
    editor.type_text("half")

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert editor.buffer.lines() == ("let x = 1",)
    assert not editor.buffer.state.inserting


@pytest.mark.asyncio
async def test_modified_paths_and_documents(tmp_path) -> None:
    editor = InMemoryEditor(cwd=str(tmp_path))
    editor.open("clean.py", "a", filetype="python")
    editor.open("dirty.py", "b", filetype="python")
    editor.delete_current_line()

    assert await editor.working_directory() == str(tmp_path)
    assert await editor.modified_paths() == [str(tmp_path / "dirty.py")]
    document = await editor.document("dirty.py")
    assert document is not None
    assert document.path == str(tmp_path / "dirty.py")
    assert document.revision == 1
    assert await editor.document("unknown.py") is None


def test_undo_emits_change() -> None:
    editor = make_editor("one\ntwo")
    editor.delete_current_line()
    seen = record(editor.bus, TEXT_CHANGED)

    assert editor.undo() is True
    assert editor.buffer.lines() == ("one", "two")
    assert seen == [TEXT_CHANGED]
    assert editor.undo() is False
