"""
Token stream for one analysis run.

The DSL tokenizer raises on the first malformed character and silently drops
comments.  Analysis needs both a usable token list for malformed scripts and
the comment spans, so tokenizing is wrapped here: errors are captured instead
of raised, and comments are recovered by a separate best-effort scan.
"""
from __future__ import annotations

import logging

from rhlsp.dsl.tokenizer import DslSyntaxError, Token, TokenType, scan, tokenize
from rhlsp.errors import AnalysisError
from rhlsp.text import LINE_CHR_ZERO, TextDocument

logger = logging.getLogger(__name__)


def tokenize_with_errors(text_document: TextDocument) -> tuple[list[Token], list[AnalysisError]]:
    """Return ``(tokens, errors)`` for *text_document*; never raises.

    On a syntax error the tokens read before it are kept, terminated by an
    end-of-file token at the error position.
    """
    try:
        return tokenize(text_document.text), []
    except DslSyntaxError as e:
        error = AnalysisError(line_chr=text_document.get_line_chr(e.position),
                              message=e.simple_message)
        return list(e.tokens or [Token(TokenType.END_OF_FILE, '', e.position, 0)]), [error]
    except Exception as e:
        logger.warning('tokenize_with_errors: tokenizer failed', exc_info=True)
        eof = Token(TokenType.END_OF_FILE, '', 0, 0)
        return [eof], [AnalysisError(line_chr=LINE_CHR_ZERO, message=str(e))]


def scan_comment_tokens(text: str) -> list[Token]:
    """Return the comment tokens of *text* found before any malformed input.

    Best effort: errors are ignored, they are reported by
    :func:`tokenize_with_errors`.
    """
    comments: list[Token] = []
    try:
        for token in scan(text):
            if token.type is TokenType.COMMENT:
                comments.append(token)
    except Exception:
        pass
    return comments
