from __future__ import annotations

import asyncio
from typing import List

import pytest

from helpers import make_session

from buffer_bridge.adapters.textual import TextualBridgeAdapter, TextualUIHooks
from buffer_bridge.host import InMemoryEditor
from buffer_bridge.host.loopback import LoopbackBackend
from buffer_bridge.sync import RenameCoordinator, UpdateDispatcher


async def make_adapter(
    hooks: TextualUIHooks, *, text: str = "let x = 1\nprint(x)"
) -> tuple[
    TextualBridgeAdapter, InMemoryEditor, LoopbackBackend, UpdateDispatcher
]:
    session, _ = make_session()
    editor = InMemoryEditor()
    backend = LoopbackBackend()
    dispatcher = UpdateDispatcher(session, editor, backend)
    dispatcher.bind(editor.bus)
    editor.open("main.js", text, filetype="javascript")
    await dispatcher.flush()
    coordinator = RenameCoordinator(session, editor, backend)
    return (
        TextualBridgeAdapter(editor, dispatcher, coordinator, hooks),
        editor,
        backend,
        dispatcher,
    )


@pytest.mark.asyncio
async def test_adapter_updates_buffer_and_status() -> None:
    updates: List[str] = []
    statuses: List[str] = []
    hooks = TextualUIHooks(
        update_buffer=lambda mirror: updates.append(mirror.text),
        update_status=lambda status: statuses.append(status),
    )
    adapter, _, _, _ = await make_adapter(hooks)

    assert adapter.handle_textual_key("i") == "enter_insert"
    assert adapter.handle_textual_key("z", text="z") == "insert"
    assert adapter.handle_textual_key("ESC") == "exit_insert"

    assert updates[-1] == "zlet x = 1\nprint(x)"
    assert statuses == ["-- INSERT --", ""]


@pytest.mark.asyncio
async def test_insert_keys_sync_current_line() -> None:
    hooks = TextualUIHooks(update_buffer=lambda mirror: None)
    adapter, _, backend, dispatcher = await make_adapter(hooks)

    adapter.handle_textual_key("j")
    adapter.handle_textual_key("i")
    adapter.handle_textual_key("!", text="!")
    await dispatcher.flush()

    assert backend.partial_syncs[-1].buffer == ("!print(x)",)
    assert backend.partial_syncs[-1].line == 2


@pytest.mark.asyncio
async def test_rename_key_runs_transaction() -> None:
    statuses: List[str] = []
    hooks = TextualUIHooks(
        update_buffer=lambda mirror: None,
        update_status=lambda status: statuses.append(status),
    )
    adapter, editor, _, _ = await make_adapter(hooks)
    for _ in range(4):
        adapter.handle_textual_key("l")

    assert adapter.handle_textual_key("r") == "rename"
    await asyncio.sleep(0)
    assert adapter.handle_textual_key("r", text="r") == "insert"
    adapter.handle_textual_key("ESC")
    for _ in range(50):
        await asyncio.sleep(0)
        if statuses and statuses[-1].startswith("rename:"):
            break

    assert statuses[-1] == "rename:applied"
    assert editor.buffer.lines() == ("let r = 1", "print(r)")


@pytest.mark.asyncio
async def test_undo_and_delete_line_keys() -> None:
    hooks = TextualUIHooks(update_buffer=lambda mirror: None)
    adapter, editor, _, _ = await make_adapter(hooks)

    assert adapter.handle_textual_key("D") == "delete_line"
    assert editor.buffer.lines() == ("print(x)",)
    assert adapter.handle_textual_key("u") == "undo"
    assert editor.buffer.lines() == ("let x = 1", "print(x)")
    assert adapter.handle_textual_key("u") == "undo_empty"
    assert adapter.handle_textual_key("?") == "ignored"


@pytest.mark.asyncio
async def test_adapter_emits_log_lines() -> None:
    logs: List[str] = []
    hooks = TextualUIHooks(
        update_buffer=lambda mirror: None,
        log=lambda line: logs.append(line),
    )
    adapter, _, _, _ = await make_adapter(hooks)

    adapter.handle_textual_key("i")

    assert any(line.startswith("key ->") for line in logs)
    assert any("revision=" in line for line in logs)
