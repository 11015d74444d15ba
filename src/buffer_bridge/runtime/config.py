"""Session configuration with environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Mapping, Optional

from .telemetry import ENV_PREFIX


@dataclass(frozen=True, slots=True)
class BridgeConfig:
    """Timing knobs for the sync engine.

    Each change-event kind gets its own coalescing window because each maps to
    a different latency budget: switching buffers, editing in normal mode and
    typing in insert mode.
    """

    buffer_enter_debounce_ms: int = 100
    text_changed_debounce_ms: int = 200
    insert_debounce_ms: int = 0
    rename_timeout_s: float = 10.0

    def __post_init__(self) -> None:
        for name in (
            "buffer_enter_debounce_ms",
            "text_changed_debounce_ms",
            "insert_debounce_ms",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")
        if self.rename_timeout_s <= 0:
            raise ValueError("rename_timeout_s must be > 0")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BridgeConfig":
        """Build a config from ``BUFFER_BRIDGE_*`` variables.

        ``BUFFER_BRIDGE_RENAME_TIMEOUT_S=2.5`` overrides ``rename_timeout_s``
        and so on; unset variables keep their defaults.
        """

        env = os.environ if environ is None else environ
        overrides: dict[str, object] = {}
        for item in fields(cls):
            raw = env.get(f"{ENV_PREFIX}{item.name.upper()}")
            if raw is None or raw == "":
                continue
            try:
                overrides[item.name] = (
                    float(raw) if item.name.endswith("_s") else int(raw)
                )
            except ValueError as exc:
                raise ValueError(
                    f"Invalid value {raw!r} for {ENV_PREFIX}{item.name.upper()}"
                ) from exc
        return cls(**overrides)  # type: ignore[arg-type]

    def with_overrides(self, **changes: object) -> "BridgeConfig":
        return replace(self, **changes)  # type: ignore[arg-type]


__all__ = ["BridgeConfig"]
