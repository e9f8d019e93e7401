"""
Hover handler.

When the cursor is inside a statement, show the documentation of the
statement's concept keyword together with its signatures.  The hover range
spans from the keyword to the cursor, or up to the next statement when one
follows on the analysed lines.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from lsprotocol import types as lsp

from rhlsp.handlers.positions import to_line_chr, to_lsp_position
from rhlsp.text import LineChr

if TYPE_CHECKING:
    from rhlsp.document import DslDocument


class HoverDescription(NamedTuple):
    keyword: str
    description: str
    start: LineChr
    end: LineChr


def hover_description(document: DslDocument, line_chr: LineChr) -> HoverDescription | None:
    analysis = document.get_analysis(line_chr)
    if analysis.keyword_token is None or analysis.is_after_any_error_line(line_chr):
        return None

    keyword = analysis.keyword_token.value
    description = document.dsl_context.queries.description_of(keyword)
    if not description:
        description = f"No documentation found for '{keyword}'."

    text_document = analysis.text_document
    start = text_document.get_line_chr(analysis.keyword_token.position)
    end = line_chr
    if analysis.next_keyword_token is not None:
        end = text_document.get_line_chr(analysis.next_keyword_token.position - 1)

    return HoverDescription(keyword, description, start, end)


def _hover_markdown(document: DslDocument, hover: HoverDescription) -> str:
    lines = [f'### `{hover.keyword}`', '', hover.description]
    signatures = document.dsl_context.queries.signatures_of(hover.keyword)
    if signatures:
        lines.append('')
        lines.append('**Syntax**')
        lines.append('')
        for signature in signatures:
            lines.append(f'- `{signature.signature}`')
    return '\n'.join(lines)


def get_hover(document: DslDocument, position: lsp.Position) -> lsp.Hover | None:
    """Return LSP hover content for *position* in *document*, or *None*."""
    hover = hover_description(document, to_line_chr(position))
    if hover is None:
        return None
    return lsp.Hover(
        contents=lsp.MarkupContent(
            kind=lsp.MarkupKind.Markdown,
            value=_hover_markdown(document, hover),
        ),
        range=lsp.Range(start=to_lsp_position(hover.start), end=to_lsp_position(hover.end)),
    )
