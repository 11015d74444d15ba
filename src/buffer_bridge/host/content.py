"""Serve document content to a backend that asks for it."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable

from lsprotocol.types import TextDocumentItem

from buffer_bridge.runtime import telemetry
from buffer_bridge.sync.lsp import document_path

from .protocols import DocumentSource

LanguageIdResolver = Callable[[str], str]


class ContentProvider:
    """Answer content requests from the editor first, then from disk.

    Buffers with unsaved changes are served from memory with the buffer's
    change counter as the version, so the backend sees what the user sees.
    Everything else is read from disk at version 1. Language ids for files
    that are not open come from ``language_id_for``.
    """

    def __init__(
        self, source: DocumentSource, *, language_id_for: LanguageIdResolver
    ) -> None:
        self._source = source
        self._language_id_for = language_id_for
        self.logger = telemetry.get_logger("buffer_bridge.host")

    async def provide(self, uri: str) -> TextDocumentItem:
        cwd = await self._source.working_directory()
        path = document_path(uri, cwd)
        modified = {document_path(p, cwd) for p in await self._source.modified_paths()}

        if path in modified:
            document = await self._source.document(path)
            if document is not None:
                self.logger.debug(f"content for {path} served from buffer")
                return TextDocumentItem(
                    uri=uri,
                    language_id=document.filetype,
                    version=document.revision,
                    text="\n".join(document.lines),
                )

        text = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
        self.logger.debug(f"content for {path} served from disk")
        return TextDocumentItem(
            uri=uri,
            language_id=self._language_id_for(path),
            version=1,
            text=text,
        )


__all__ = ["ContentProvider", "LanguageIdResolver"]
