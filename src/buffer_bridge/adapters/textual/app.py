"""Executable Textual app that hosts the buffer bridge against a loopback backend."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence, Tuple

try:  # pragma: no cover - imported only when demo is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' extra to use buffer_bridge.adapters.textual.app"
    ) from exc

from buffer_bridge.buffer import BufferMirror
from buffer_bridge.host import InMemoryEditor
from buffer_bridge.host.loopback import LoopbackBackend
from buffer_bridge.runtime import BridgeConfig, telemetry
from buffer_bridge.sync import RenameCoordinator, SessionContext, UpdateDispatcher

from .controller import TextualBridgeAdapter, TextualUIHooks

DEFAULT_TEXT = "let x = 1\nlet y = x + x\nprint(x)\n"


@dataclass
class UIState:
    buffer_text: str = ""
    status_text: str = ""
    sync_text: str = ""


class BufferBridgeApp(App[None]):
    """Minimal Textual UI: the active buffer plus status and sync lines."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#buffer-view {
		height: 1fr;
		border: round $accent;
		padding: 1 1;
		content-align: left top;
		overflow: auto;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}

	#sync-line {
		height: 1;
		background: $surface-darken-2;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        *,
        path: str,
        text: str,
        filetype: str,
        config: BridgeConfig,
        latency_s: float = 0.0,
    ) -> None:
        super().__init__()
        self._state = UIState()
        self._path = path
        self._text = text
        self._filetype = filetype
        self._config = config
        self.backend = LoopbackBackend(latency_s=latency_s)
        self.editor: InMemoryEditor | None = None
        self.dispatcher: UpdateDispatcher | None = None
        self.adapter: TextualBridgeAdapter | None = None
        self._buffer_widget: Static | None = None
        self._status_widget: Static | None = None
        self._sync_widget: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="buffer-area"):
            self._buffer_widget = Static("", id="buffer-view")
            yield self._buffer_widget
        self._status_widget = Static("", id="status-line")
        self._sync_widget = Static("", id="sync-line")
        yield self._status_widget
        yield self._sync_widget
        yield Footer()

    async def on_mount(self) -> None:
        session = SessionContext(self._config, warn=self._warn)
        self.editor = InMemoryEditor()
        self.dispatcher = UpdateDispatcher(session, self.editor, self.backend)
        self.dispatcher.bind(self.editor.bus)
        coordinator = RenameCoordinator(session, self.editor, self.backend)
        hooks = TextualUIHooks(
            update_buffer=self._update_buffer,
            update_status=self._update_status,
            log=self._log_line,
        )
        self.editor.open(self._path, self._text, filetype=self._filetype)
        self.adapter = TextualBridgeAdapter(
            self.editor, self.dispatcher, coordinator, hooks
        )
        self.set_interval(0.25, self._refresh_sync_line)

    async def on_unmount(self) -> None:
        if self.dispatcher:
            self.dispatcher.unbind()
            self.dispatcher.cancel()

    async def on_key(self, event: events.Key) -> None:
        if not self.adapter:
            return
        normalized = self._normalize_key(event)
        if normalized is None:
            return
        key, text = normalized
        self.adapter.handle_textual_key(key, text=text)
        event.stop()

    def _update_buffer(self, mirror: BufferMirror) -> None:
        line, column = mirror.cursor
        rows = mirror.text.split("\n")
        if 0 < line <= len(rows):
            row = rows[line - 1]
            index = min(column - 1, len(row))
            rows[line - 1] = row[:index] + "▏" + row[index:]
        self._state.buffer_text = "\n".join(rows)
        if self._buffer_widget:
            self._buffer_widget.update(self._state.buffer_text)

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(status)

    def _warn(self, message: str, **data: Any) -> None:
        telemetry.record_event(
            "warning", level="warning", data={"message": message, **data}
        )
        self._update_status(f"warning: {message}")

    def _refresh_sync_line(self) -> None:
        if not (self.editor and self._sync_widget):
            return
        state = self.dispatcher.session.state if self.dispatcher else None
        revision = state.revision if state else -1
        self._state.sync_text = (
            f"synced rev {revision} | full {len(self.backend.full_syncs)}"
            f" | partial {len(self.backend.partial_syncs)}"
        )
        self._sync_widget.update(self._state.sync_text)

    def _log_line(self, line: str) -> None:
        telemetry.get_logger("buffer_bridge.textual").debug(line)

    @staticmethod
    def _normalize_key(event: events.Key) -> Optional[Tuple[str, Optional[str]]]:
        key = event.key
        if key in {"ctrl+c", "ctrl+q"}:
            return None
        if key == "escape":
            return ("ESC", None)
        if key in {"enter", "return"}:
            return ("ENTER", None)
        if key == "backspace":
            return ("BACKSPACE", None)
        if event.character and event.is_printable:
            return (event.character, event.character)
        return (key.upper(), None)


def _guess_filetype(path: str) -> str:
    suffix = Path(path).suffix.lstrip(".")
    return {"py": "python", "js": "javascript", "ts": "typescript"}.get(
        suffix, suffix or "text"
    )


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    defaults = BridgeConfig.from_env()
    parser = argparse.ArgumentParser(
        description="Run the buffer bridge Textual demo against a loopback backend."
    )
    parser.add_argument(
        "--file",
        default=os.environ.get("BUFFER_BRIDGE_DEMO_FILE"),
        help="File to open (default: a small scratch buffer)",
    )
    parser.add_argument(
        "--latency",
        type=float,
        default=0.0,
        help="Artificial backend latency for rename requests, in seconds",
    )
    parser.add_argument(
        "--rename-timeout",
        type=float,
        default=defaults.rename_timeout_s,
        help=f"Seconds to wait for a rename (default: {defaults.rename_timeout_s})",
    )
    parser.add_argument(
        "--preset",
        default="editor",
        choices=("development", "editor", "quiet"),
        help="Telemetry preset (default: editor, which logs to a file)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    telemetry.configure(preset=args.preset)
    config = BridgeConfig.from_env().with_overrides(
        rename_timeout_s=args.rename_timeout
    )
    if args.file:
        path = args.file
        text = Path(path).read_text(encoding="utf-8") if Path(path).exists() else ""
    else:
        path, text = "scratch.txt", DEFAULT_TEXT
    app = BufferBridgeApp(
        path=path,
        text=text,
        filetype=_guess_filetype(path),
        config=config,
        latency_s=args.latency,
    )
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
