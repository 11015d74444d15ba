"""Buffer synchronization and transactional-edit engine."""

from .debounce import Debouncer
from .dispatcher import UpdateDispatcher
from .gate import SyncGate, SyncGateBusyError
from .lsp import (
    document_path,
    from_lsp_position,
    path_to_uri,
    text_edits_to_operations,
    to_lsp_position,
    uri_to_path,
    workspace_edit_to_patches,
)
from .patch import DocumentPatch, EditKind, EditOperation, PatchApplier
from .rename import RenameCoordinator, RenameState, RenameTransaction
from .revision import UNKNOWN_REVISION, RevisionTracker
from .session import SessionContext, SyncState

__all__ = [
    "Debouncer",
    "DocumentPatch",
    "EditKind",
    "EditOperation",
    "PatchApplier",
    "RenameCoordinator",
    "RenameState",
    "RenameTransaction",
    "RevisionTracker",
    "SessionContext",
    "SyncGate",
    "SyncGateBusyError",
    "SyncState",
    "UNKNOWN_REVISION",
    "UpdateDispatcher",
    "document_path",
    "from_lsp_position",
    "path_to_uri",
    "text_edits_to_operations",
    "to_lsp_position",
    "uri_to_path",
    "workspace_edit_to_patches",
]
