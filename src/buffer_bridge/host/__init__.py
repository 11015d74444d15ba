"""Editor-side collaborators: protocols, events and the in-memory editor.

``host.content`` and ``host.loopback`` build on the sync layer and are
imported by module path.
"""

from .events import (
    BUFFER_ENTER,
    CHANGE_EVENTS,
    INSERT_ENTER,
    INSERT_LEAVE,
    TEXT_CHANGED,
    TEXT_CHANGED_INSERT,
    EditorEventBus,
)
from .memory import InMemoryEditor
from .protocols import (
    BackendError,
    DocumentSource,
    EditorHost,
    LanguageBackend,
    OpenDocument,
    RenameRequest,
)

__all__ = [
    "BUFFER_ENTER",
    "CHANGE_EVENTS",
    "INSERT_ENTER",
    "INSERT_LEAVE",
    "TEXT_CHANGED",
    "TEXT_CHANGED_INSERT",
    "BackendError",
    "DocumentSource",
    "EditorEventBus",
    "EditorHost",
    "InMemoryEditor",
    "LanguageBackend",
    "OpenDocument",
    "RenameRequest",
]
