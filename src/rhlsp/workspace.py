"""
Open documents of the session.

Besides the per-URI :class:`DslDocument` store, the workspace remembers when
each document last changed and when documents were closed, so the diagnostics
publisher can pick up exactly what happened since its previous cycle.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from rhlsp.context import DslContext
from rhlsp.document import DslDocument

logger = logging.getLogger(__name__)


class DslWorkspace:
    def __init__(self, dsl_context: DslContext, clock: Callable[[], float] = time.monotonic):
        self._dsl_context = dsl_context
        self._clock = clock
        self._lock = threading.Lock()
        self._documents: dict[str, DslDocument] = {}
        self._updated_at: dict[str, float] = {}
        self._closed_at: dict[str, float] = {}

    @property
    def dsl_context(self) -> DslContext:
        return self._dsl_context

    def get_document(self, uri: str) -> DslDocument | None:
        with self._lock:
            return self._documents.get(uri)

    def open_document(self, uri: str, text: str) -> DslDocument:
        with self._lock:
            document = self._documents.get(uri)
            if document is None:
                document = DslDocument(self._dsl_context)
                self._documents[uri] = document
            self._closed_at.pop(uri, None)
        document.update_text(text)
        self._touch(uri)
        logger.debug('open_document: %s (%d chars)', uri, len(text))
        return document

    def update_document(self, uri: str, text: str) -> DslDocument:
        document = self.get_document(uri)
        if document is None:
            return self.open_document(uri, text)
        document.update_text(text)
        self._touch(uri)
        return document

    def close_document(self, uri: str) -> None:
        with self._lock:
            if self._documents.pop(uri, None) is None:
                return
            self._updated_at.pop(uri, None)
            self._closed_at[uri] = self._clock()
        logger.debug('close_document: %s', uri)

    def mark_all_updated(self) -> None:
        """Flag every open document as changed (e.g. after the DSL context loads)."""
        with self._lock:
            now = self._clock()
            for uri in self._documents:
                self._updated_at[uri] = now

    def get_updated_documents(self, since: float) -> list[str]:
        """URIs changed at or after *since*; a change in the same clock tick as
        the previous publish is picked up again."""
        with self._lock:
            return [uri for uri, updated in self._updated_at.items() if updated >= since]

    def get_closed_documents(self, since: float) -> list[str]:
        with self._lock:
            return [uri for uri, closed in self._closed_at.items() if closed >= since]

    def _touch(self, uri: str) -> None:
        with self._lock:
            if uri in self._documents:
                self._updated_at[uri] = self._clock()
