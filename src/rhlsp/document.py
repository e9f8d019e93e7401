"""
Per-document analysis cache.

Each open document is stored as a ``DslDocument`` holding its current text
and the analysis results computed for it, keyed by cursor offset (``-1`` for
the whole document).  Results depend on the exact text up to the cursor, so
the cache is cleared as a whole whenever the text changes.

Analysis runs are serialized across all documents by ``_analysis_lock``: the
tokenizer and parser are not assumed to be thread-safe.  Lookups of cached
results only take the document's own lock.
"""
from __future__ import annotations

import logging
import threading

from rhlsp.analysis import AnalysisResult, CodeAnalysisRun
from rhlsp.context import DslContext
from rhlsp.text import LineChr, TextDocument

logger = logging.getLogger(__name__)

_analysis_lock = threading.Lock()

WHOLE_DOCUMENT = -1


class DslDocument:
    def __init__(self, dsl_context: DslContext, text: str = ''):
        self._dsl_context = dsl_context
        self._lock = threading.Lock()
        self._cached_results: dict[int, AnalysisResult] = {}
        self.text_document = TextDocument(text)

    @property
    def dsl_context(self) -> DslContext:
        return self._dsl_context

    def update_text(self, text: str) -> None:
        with self._lock:
            self.text_document = TextDocument(text)
            self._cached_results.clear()

    def get_analysis(self, line_chr: LineChr | None = None) -> AnalysisResult:
        """Analysis at *line_chr*, or of the whole document when it is ``None``."""
        with self._lock:
            if line_chr is None:
                cache_key = WHOLE_DOCUMENT
            else:
                # positions past a line or document end share the clamped entry
                cache_key = self.text_document.get_position(line_chr)
                line_chr = self.text_document.get_line_chr(cache_key)
            cached = self._cached_results.get(cache_key)
            if cached is not None:
                return cached

            with _analysis_lock:
                if not self._dsl_context.is_initialized:
                    return AnalysisResult.empty(self.text_document)

                analysis_run = CodeAnalysisRun(self.text_document, self._dsl_context)
                result = analysis_run.run_for_position(line_chr)
                self._cached_results[cache_key] = result
                return result
