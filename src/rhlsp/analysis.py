"""
Cursor-relative analysis of a DSL script.

There is no persistent syntax tree.  To answer "what is the user typing at
this position" the script is truncated after the cursor's line, tokenized and
parsed from scratch, and the parser's progress events are observed:

* ``on_keyword`` tracks the statement keyword at or before the cursor and the
  first keyword after it;
* ``on_member_read`` collects the concepts the cursor could be completing and
  how many of their parameters were read before the cursor;
* ``on_update_context`` snapshots the stack of enclosing blocks.

A :class:`CodeAnalysisRun` produces one immutable :class:`AnalysisResult`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from rhlsp.context import DslContext
from rhlsp.dsl.concepts import ConceptInfo, ConceptMember
from rhlsp.dsl.parser import DslParser, ParseListener, TokenReader, ValueOrError
from rhlsp.dsl.tokenizer import DslSyntaxError, Token, TokenType
from rhlsp.errors import AnalysisError
from rhlsp.text import LINE_CHR_ZERO, LineChr, TextDocument
from rhlsp.tokens import scan_comment_tokens, tokenize_with_errors

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    text_document: TextDocument
    line: int
    chr: int
    tokens: tuple[Token, ...] = ()
    comment_tokens: tuple[Token, ...] = ()
    tokenizer_errors: tuple[AnalysisError, ...] = ()
    parser_errors: tuple[AnalysisError, ...] = ()
    keyword_token: Token | None = None
    next_keyword_token: Token | None = None
    concept_context: tuple[ConceptInfo, ...] = ()
    valid_concepts: tuple[ConceptInfo, ...] = ()
    last_token_parsed: Mapping[type, Token] = field(default_factory=lambda: MappingProxyType({}))
    last_member_read: Mapping[type, ConceptMember] = field(default_factory=lambda: MappingProxyType({}))
    is_inside_comment: bool = False
    successful_run: bool = False

    @classmethod
    def empty(cls, text_document: TextDocument, line_chr: LineChr = LINE_CHR_ZERO) -> 'AnalysisResult':
        return cls(text_document=text_document, line=line_chr.line, chr=line_chr.chr)

    @property
    def all_errors(self) -> list[AnalysisError]:
        return [*self.tokenizer_errors, *self.parser_errors]

    def _source_tokens(self):
        return (t for t in self.tokens if t.type is not TokenType.END_OF_FILE)

    def get_token_at_position(self, line_chr: LineChr) -> Token | None:
        """The token whose span contains *line_chr*."""
        position = self.text_document.get_position(line_chr)
        for token in self._source_tokens():
            if token.position <= position < token.end:
                return token
        return None

    def get_token_being_typed_at_cursor(self, line_chr: LineChr) -> Token | None:
        """The token containing *line_chr* or ending right at it."""
        position = self.text_document.get_position(line_chr)
        typing = None
        for token in self._source_tokens():
            if token.position > position:
                break
            if position <= token.end:
                typing = token
        return typing

    def is_after_any_error_line(self, line_chr: LineChr) -> bool:
        return any(line_chr.line >= error.line_chr.line for error in self.all_errors)

    def get_valid_concepts_with_active_parameter(self) -> list[tuple[ConceptInfo, int]]:
        """Each valid concept with the index of the next parameter to type."""
        result = []
        for concept in self.valid_concepts:
            member = self.last_member_read.get(type(concept))
            result.append((concept, member.index + 1 if member is not None else 0))
        return result


class _AnalysisBuilder(ParseListener):
    """Mutable state of one run, fed by the parser events."""

    def __init__(self, tokens: list[Token], target_pos: int):
        self.tokens = tokens
        self.target_pos = target_pos
        self.last_token_before_target: Token | None = None
        for token in tokens:
            if token.type is not TokenType.END_OF_FILE and token.position <= target_pos:
                self.last_token_before_target = token
        self.keyword_token: Token | None = None
        self.next_keyword_token: Token | None = None
        self.concept_context: tuple[ConceptInfo, ...] = ()
        self.valid_concepts: list[ConceptInfo] = []
        self.last_token_parsed: dict[type, Token] = {}
        self.last_member_read: dict[type, ConceptMember] = {}

    def on_keyword(self, reader: TokenReader, keyword: str | None) -> None:
        position = reader.position_in_token_list
        if position >= len(self.tokens):
            return

        token = self.tokens[position]
        if keyword is None and position > 0:
            token = self.tokens[position - 1]

        if token.position <= self.target_pos:
            if keyword is not None:
                self.keyword_token = token
                self.valid_concepts = []
            else:
                self.keyword_token = None
        elif self.next_keyword_token is None:
            self.next_keyword_token = token

    def on_member_read(self, reader: TokenReader, concept: ConceptInfo,
                       member: ConceptMember, value: ValueOrError) -> None:
        position = reader.position_in_token_list
        if position <= 0 or position > len(self.tokens) or self.last_token_before_target is None:
            return

        last_token_read = self.tokens[position - 1]
        boundary = self.last_token_before_target.position
        if last_token_read.position >= boundary:
            if all(type(valid) is not type(concept) for valid in self.valid_concepts):
                self.valid_concepts.append(concept)
        if last_token_read.position <= boundary and not value.is_error:
            self.last_token_parsed[type(concept)] = last_token_read
            self.last_member_read[type(concept)] = member

    def on_update_context(self, reader: TokenReader, context: list[ConceptInfo],
                          is_opening: bool) -> None:
        position = reader.position_in_token_list
        if position <= 0 or position > len(self.tokens):
            return
        if self.tokens[position - 1].end <= self.target_pos:
            self.concept_context = tuple(context)


class CodeAnalysisRun:
    def __init__(self, text_document: TextDocument, dsl_context: DslContext):
        self._full_text_document = text_document
        self._dsl_context = dsl_context
        self._done = False

    def run_for_document(self) -> AnalysisResult:
        return self.run_for_position(None)

    def run_for_position(self, line_chr: LineChr | None) -> AnalysisResult:
        if not self._dsl_context.is_initialized:
            raise RuntimeError('Attempted CodeAnalysisRun before DslContext was initialized.')
        if self._done:
            raise RuntimeError('Analysis already run.')
        self._done = True

        if line_chr is None:
            text_document = self._full_text_document
            line_chr = LINE_CHR_ZERO
        else:
            text_document = TextDocument(
                self._full_text_document.get_truncated_at_next_end_of_line(line_chr))
        target_pos = text_document.get_position(line_chr)

        tokens, tokenizer_errors = tokenize_with_errors(text_document)
        comment_tokens = scan_comment_tokens(text_document.text)

        builder = _AnalysisBuilder(tokens, target_pos)
        parser_errors = self._parse(text_document, tokens, builder, bool(tokenizer_errors))

        keyword_token, is_inside_comment = self._apply_comments(
            text_document, comment_tokens, target_pos, line_chr, builder.keyword_token)

        logger.debug('CodeAnalysisRun at %s: %d tokens, %d errors, keyword=%r',
                     line_chr, len(tokens), len(tokenizer_errors) + len(parser_errors),
                     keyword_token.value if keyword_token else None)

        return AnalysisResult(
            text_document=text_document,
            line=line_chr.line,
            chr=line_chr.chr,
            tokens=tuple(tokens),
            comment_tokens=tuple(comment_tokens),
            tokenizer_errors=tuple(tokenizer_errors),
            parser_errors=tuple(parser_errors),
            keyword_token=keyword_token,
            next_keyword_token=builder.next_keyword_token,
            concept_context=builder.concept_context,
            valid_concepts=tuple(builder.valid_concepts),
            last_token_parsed=MappingProxyType(dict(builder.last_token_parsed)),
            last_member_read=MappingProxyType(dict(builder.last_member_read)),
            is_inside_comment=is_inside_comment,
            successful_run=True,
        )

    def _parse(self, text_document: TextDocument, tokens: list[Token],
               builder: _AnalysisBuilder, tokens_incomplete: bool) -> list[AnalysisError]:
        parser = DslParser(tokens, self._dsl_context.concept_types)
        try:
            parser.parse_concepts(builder)
        except DslSyntaxError as e:
            # an incomplete token list ends at the tokenizer error, which is already reported
            if tokens_incomplete and e.position >= tokens[-1].position:
                return []
            return [AnalysisError(line_chr=text_document.get_line_chr(e.position),
                                  message=e.simple_message)]
        except Exception as e:
            logger.warning('CodeAnalysisRun: parser failed', exc_info=True)
            return [AnalysisError(line_chr=LINE_CHR_ZERO, message=str(e))]
        return []

    @staticmethod
    def _apply_comments(text_document: TextDocument, comment_tokens: list[Token],
                        target_pos: int, line_chr: LineChr, keyword_token: Token | None):
        last_comment_before_target = None
        for comment in comment_tokens:
            # token span includes the leading '//' that the value omits
            if comment.position <= target_pos < comment.end:
                return None, True
            if comment.position > target_pos:
                break
            last_comment_before_target = comment

        # cursor at the end of a line that ends with a comment
        if last_comment_before_target is not None:
            comment_line = text_document.get_line_chr(last_comment_before_target.position).line
            if comment_line == line_chr.line:
                return None, True
        return keyword_token, False
