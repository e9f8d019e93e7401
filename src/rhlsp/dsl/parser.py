"""
Keyword-driven parser for the concept DSL.

Each statement starts with a concept keyword followed by the concept's
parameters and ends with ``;`` or with a ``{ ... }`` block of nested
statements.  Every concept type registered for the keyword is tried; the
parser reports its progress to a :class:`ParseListener` so that tooling can
observe the state of parsing at any token.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from rhlsp.dsl.concepts import (
    ConceptInfo, ConceptMember, keyword_of, members_of, type_description,
)
from rhlsp.dsl.tokenizer import DslSyntaxError, Token, TokenType


@dataclass(frozen=True)
class ValueOrError:
    value: Any = None
    error: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @classmethod
    def ok(cls, value) -> 'ValueOrError':
        return cls(value=value)

    @classmethod
    def fail(cls, error: str) -> 'ValueOrError':
        return cls(error=error)


class TokenReader:
    """Cursor over a token list terminated by an end-of-file token."""

    def __init__(self, tokens: list[Token], position_in_token_list: int = 0):
        self.tokens = tokens
        self.position_in_token_list = position_in_token_list

    def copy(self) -> 'TokenReader':
        return TokenReader(self.tokens, self.position_in_token_list)

    @property
    def end_of_input(self) -> bool:
        return (self.position_in_token_list >= len(self.tokens)
                or self.tokens[self.position_in_token_list].type is TokenType.END_OF_FILE)

    def peek(self) -> Token | None:
        if self.end_of_input:
            return None
        return self.tokens[self.position_in_token_list]

    @property
    def current_offset(self) -> int:
        if self.position_in_token_list < len(self.tokens):
            return self.tokens[self.position_in_token_list].position
        return self.tokens[-1].end if self.tokens else 0

    def next_is(self, special: str) -> bool:
        token = self.peek()
        return token is not None and token.type is TokenType.SPECIAL and token.value == special

    def try_read(self, special: str) -> bool:
        if self.next_is(special):
            self.position_in_token_list += 1
            return True
        return False

    def read_text(self) -> ValueOrError:
        token = self.peek()
        if token is None:
            return ValueOrError.fail('Unexpected end of script.')
        if token.type in (TokenType.TEXT, TokenType.STRING):
            self.position_in_token_list += 1
            return ValueOrError.ok(token.value)
        return ValueOrError.fail(f"Unexpected '{token.value}', expected a text value.")


class ParseListener:
    """Receives parser progress events.  All methods are no-ops by default."""

    def on_keyword(self, reader: TokenReader, keyword: str | None) -> None:
        """A statement is about to be parsed (*keyword* set) or has just ended (``None``)."""

    def on_member_read(self, reader: TokenReader, concept: ConceptInfo,
                       member: ConceptMember, value: ValueOrError) -> None:
        """An attempt to read *member* of *concept* finished."""

    def on_update_context(self, reader: TokenReader, context: list[ConceptInfo],
                          is_opening: bool) -> None:
        """A ``{`` pushed or a ``}`` popped the context stack (outermost first)."""


class DslParser:
    def __init__(self, tokens: list[Token], concept_types: Iterable[type]):
        self._tokens = tokens
        self._by_keyword: dict[str, list[type]] = {}
        for concept_type in concept_types:
            keyword = keyword_of(concept_type)
            if keyword:
                self._by_keyword.setdefault(keyword.lower(), []).append(concept_type)

    def parse_concepts(self, listener: ParseListener | None = None) -> list[ConceptInfo]:
        """Parse the whole token list and return the concepts in script order.

        Raises :class:`DslSyntaxError` on the first error.
        """
        listener = listener or ParseListener()
        reader = TokenReader(self._tokens)
        context: list[ConceptInfo] = []
        concepts: list[ConceptInfo] = []
        while not reader.end_of_input:
            concept = self._parse_next_concept(reader, context, listener)
            concepts.append(concept)
            self._update_context(reader, context, concept, listener)
            listener.on_keyword(reader, None)
        if context:
            raise DslSyntaxError(
                f"Expected '}}' to close '{keyword_of(type(context[-1]))}'.",
                reader.current_offset,
            )
        return concepts

    def _parse_next_concept(self, reader: TokenReader, context: list[ConceptInfo],
                            listener: ParseListener) -> ConceptInfo:
        token = reader.peek()
        keyword = token.value if token.type is TokenType.TEXT else None
        listener.on_keyword(reader, keyword)
        if keyword is None:
            raise DslSyntaxError(f"Expected a concept keyword, found '{token.value}'.",
                                 token.position)

        candidates = self._by_keyword.get(keyword.lower())
        if not candidates:
            raise DslSyntaxError(f"Unrecognized concept keyword '{keyword}'.", token.position)

        interpretations: list[tuple[ConceptInfo, TokenReader]] = []
        failures: list[tuple[int, str]] = []
        for concept_type in candidates:
            attempt = reader.copy()
            attempt.read_text()
            concept, error = self._parse_members(attempt, concept_type, context, listener)
            if error is None:
                interpretations.append((concept, attempt))
            else:
                failures.append((attempt.current_offset, error))

        if not interpretations:
            position, message = max(failures, key=lambda failure: failure[0])
            raise DslSyntaxError(message, position)

        terminated = [i for i in interpretations if i[1].next_is(';') or i[1].next_is('{')]
        if terminated:
            interpretations = terminated
        furthest = max(attempt.position_in_token_list for _, attempt in interpretations)
        best = [i for i in interpretations if i[1].position_in_token_list == furthest]
        if len(best) > 1:
            names = ', '.join(type(concept).__name__ for concept, _ in best)
            raise DslSyntaxError(f"Ambiguous syntax for '{keyword}': {names}.", token.position)

        concept, attempt = best[0]
        reader.position_in_token_list = attempt.position_in_token_list
        return concept

    def _parse_members(self, reader: TokenReader, concept_type: type,
                       context: list[ConceptInfo], listener: ParseListener):
        concept = concept_type()
        after_inline_parent = False
        for member in members_of(concept_type):
            # a key read inline, not taken from the context, is followed by '.'
            needs_dot = after_inline_parent and member.is_key and not member.is_concept
            after_inline_parent = False
            if needs_dot and not reader.try_read('.'):
                value = ValueOrError.fail(
                    f"Expected '.' before the {member.name} of {type_description(concept_type)}.")
            elif (member.index == 0 and member.is_concept and context
                    and isinstance(context[-1], member.type)):
                value = ValueOrError.ok(context[-1])
            elif member.is_concept:
                value = self._read_reference(reader, member.type)
                after_inline_parent = member.is_key
            else:
                value = reader.read_text()
            listener.on_member_read(reader, concept, member, value)
            if value.is_error:
                return concept, value.error
            setattr(concept, member.name, value.value)
        return concept, None

    def _read_reference(self, reader: TokenReader, concept_type: type) -> ValueOrError:
        """Read a dotted key, e.g. ``Book.Title`` for a property reference."""
        reference = concept_type()
        key_members = [m for m in members_of(concept_type) if m.is_key]
        for i, member in enumerate(key_members):
            if i > 0 and not reader.try_read('.'):
                return ValueOrError.fail(
                    f"Expected '.' in the key of {type_description(concept_type)}.")
            if member.is_concept:
                value = self._read_reference(reader, member.type)
            else:
                value = reader.read_text()
            if value.is_error:
                return value
            setattr(reference, member.name, value.value)
        return ValueOrError.ok(reference)

    @staticmethod
    def _update_context(reader: TokenReader, context: list[ConceptInfo],
                        concept: ConceptInfo, listener: ParseListener) -> None:
        if reader.try_read('{'):
            context.append(concept)
            listener.on_update_context(reader, context, True)
        elif not reader.try_read(';'):
            raise DslSyntaxError("Expected ';' or '{'.", reader.current_offset)

        while reader.next_is('}'):
            if not context:
                raise DslSyntaxError("Unexpected '}'.", reader.current_offset)
            reader.try_read('}')
            context.pop()
            listener.on_update_context(reader, context, False)
