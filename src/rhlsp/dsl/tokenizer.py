"""
Tokenizer for the concept DSL.

The lexical grammar is defined with Lark and only its *basic* lexer is used:
concept scripts are tokenized here and parsed by :mod:`rhlsp.dsl.parser`,
which drives parsing by concept keywords rather than by a fixed grammar.

``tokenize`` follows the classic behaviour of the DSL tokenizer: comments are
silently dropped and a zero-length end-of-file token terminates the list.
``scan`` yields every token, comments included, and is what editor tooling
uses to find out whether a position lies inside a comment.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterator

from lark import Lark
from lark.exceptions import UnexpectedCharacters

_GRAMMAR = r"""
start: _item*
_item: WORD | STRING | SPECIAL

WORD: /[A-Za-z0-9_]+/
STRING: /'(?:[^']|'')*'/ | /"(?:[^"]|"")*"/
SPECIAL: /[{};.:]/
COMMENT: /\/\/[^\n]*/

%import common.WS
%ignore WS
%ignore COMMENT
"""

_lexer = Lark(_GRAMMAR, parser='lalr', lexer='basic')

_COMMENT_MARKER = '//'


class TokenType(enum.Enum):
    TEXT = 'text'              # keywords and identifiers
    STRING = 'string'          # quoted literal, value is unquoted
    SPECIAL = 'special'        # { } ; . :
    COMMENT = 'comment'        # value excludes the leading '//'
    END_OF_FILE = 'eof'


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    position: int      # absolute offset of the first character
    length: int        # length of the raw source span

    @property
    def end(self) -> int:
        return self.position + self.length


class DslSyntaxError(Exception):
    """A positioned syntax error reported by the tokenizer or the parser.

    *position* is the absolute character offset in the script.  When raised by
    :func:`tokenize`, ``tokens`` holds the tokens read before the error,
    terminated by an end-of-file token at *position*.
    """

    def __init__(self, message: str, position: int, tokens: list[Token] | None = None):
        super().__init__(f'{message} (at offset {position})')
        self.simple_message = message
        self.position = position
        self.tokens = tokens


def _convert(lark_token) -> Token:
    raw = str(lark_token)
    kind = lark_token.type
    if kind == 'WORD':
        return Token(TokenType.TEXT, raw, lark_token.start_pos, len(raw))
    if kind == 'STRING':
        quote = raw[0]
        value = raw[1:-1].replace(quote * 2, quote)
        return Token(TokenType.STRING, value, lark_token.start_pos, len(raw))
    if kind == 'COMMENT':
        return Token(TokenType.COMMENT, raw[len(_COMMENT_MARKER):],
                     lark_token.start_pos, len(raw))
    return Token(TokenType.SPECIAL, raw, lark_token.start_pos, len(raw))


def _error_message(exc: UnexpectedCharacters) -> str:
    if exc.char in ('"', "'"):
        return f'Missing closing {exc.char} for the string literal.'
    return f'Unexpected character {exc.char!r}.'


def _lex(text: str, dont_ignore: bool) -> Iterator[Token]:
    try:
        for lark_token in _lexer.lex(text, dont_ignore=dont_ignore):
            if lark_token.type == 'WS':
                continue
            yield _convert(lark_token)
    except UnexpectedCharacters as e:
        raise DslSyntaxError(_error_message(e), e.pos_in_stream) from e


def scan(text: str) -> Iterator[Token]:
    """Yield all tokens of *text*, comments included, without end-of-file token."""
    return _lex(text, dont_ignore=True)


def tokenize(text: str) -> list[Token]:
    """Return the tokens of *text*; comments are skipped.

    Raises :class:`DslSyntaxError` on the first malformed character.
    """
    tokens: list[Token] = []
    try:
        for token in _lex(text, dont_ignore=False):
            tokens.append(token)
    except DslSyntaxError as e:
        tokens.append(Token(TokenType.END_OF_FILE, '', e.position, 0))
        e.tokens = tokens
        raise
    tokens.append(Token(TokenType.END_OF_FILE, '', len(text), 0))
    return tokens
