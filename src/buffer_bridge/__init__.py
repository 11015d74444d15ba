"""Keeps an editor's live buffers and a language-analysis backend in sync."""

__all__ = [
    "adapters",
    "buffer",
    "host",
    "runtime",
    "sync",
]

__version__ = "0.1.0"
