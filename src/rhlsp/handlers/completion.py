"""
Completion handler.

Offers the concept keywords that may start a statement at the cursor: the
keywords of concepts allowed inside the innermost enclosing block, or every
keyword at the script root.  Nothing is offered inside a comment or after a
statement keyword has been completely typed.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lsprotocol import types as lsp

from rhlsp.handlers.positions import to_line_chr
from rhlsp.text import LineChr

if TYPE_CHECKING:
    from rhlsp.document import DslDocument

logger = logging.getLogger(__name__)


def completion_keywords(document: DslDocument, line_chr: LineChr) -> list[str]:
    """Return the sorted, distinct keywords valid at *line_chr*."""
    analysis = document.get_analysis(line_chr)
    if analysis.is_inside_comment:
        return []

    typing_token = analysis.get_token_being_typed_at_cursor(line_chr)
    if analysis.keyword_token is not None and analysis.keyword_token != typing_token:
        return []

    queries = document.dsl_context.queries
    last_parent = analysis.concept_context[-1] if analysis.concept_context else None
    valid_concepts = queries.valid_child_types(
        type(last_parent) if last_parent is not None else None)

    return sorted({k for k in map(queries.keyword_of, valid_concepts) if k is not None})


def get_completions(document: DslDocument, position: lsp.Position) -> list[lsp.CompletionItem]:
    """Return completion items for *position* in *document*."""
    line_chr = to_line_chr(position)
    keywords = completion_keywords(document, line_chr)
    logger.debug('get_completions at %s: %d keywords\n%s', line_chr, len(keywords),
                 document.text_document.show_position(line_chr))

    queries = document.dsl_context.queries
    items: list[lsp.CompletionItem] = []
    for keyword in keywords:
        description = queries.description_of(keyword)
        items.append(lsp.CompletionItem(
            label=keyword,
            kind=lsp.CompletionItemKind.Keyword,
            insert_text=keyword,
            documentation=lsp.MarkupContent(
                kind=lsp.MarkupKind.PlainText,
                value=description,
            ) if description else None,
        ))
    return items
