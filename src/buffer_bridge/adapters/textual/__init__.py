"""Textual adapter; ``app`` needs the optional ``textual`` dependency."""

from .controller import TextualBridgeAdapter, TextualUIHooks

__all__ = ["TextualBridgeAdapter", "TextualUIHooks"]
