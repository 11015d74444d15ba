"""Runtime services: telemetry and configuration."""

from .config import BridgeConfig

__all__ = ["BridgeConfig"]
