"""Metadata lookups over the known concept types, used by the editor features."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from rhlsp.dsl.concepts import (
    ConceptMember, documentation_of, keyword_of, member_description, members_of,
)


@dataclass(frozen=True)
class ConceptSignature:
    concept_type: type
    signature: str
    documentation: str
    parameters: tuple[ConceptMember, ...]


class ConceptQueries:
    def __init__(self, concept_types: Iterable[type]):
        self._concept_types = tuple(concept_types)

    @property
    def concept_types(self) -> tuple[type, ...]:
        return self._concept_types

    def parameters_of(self, concept_type: type) -> tuple[ConceptMember, ...]:
        return members_of(concept_type)

    def keyword_of(self, concept_type: type) -> str | None:
        return keyword_of(concept_type)

    def valid_child_types(self, parent_type: type | None) -> list[type]:
        """Concept types that may be declared inside *parent_type*'s block.

        ``None`` stands for the script root, where every concept is allowed
        (nested concepts can be written with a full key instead).
        """
        if parent_type is None:
            return list(self._concept_types)
        valid = []
        for concept_type in self._concept_types:
            members = members_of(concept_type)
            if members and members[0].is_concept and issubclass(parent_type, members[0].type):
                valid.append(concept_type)
        return valid

    def types_with_keyword(self, keyword: str) -> list[type]:
        lowered = keyword.lower()
        return [t for t in self._concept_types
                if (keyword_of(t) or '').lower() == lowered]

    def description_of(self, keyword: str) -> str:
        """Documentation of all concepts declared with *keyword*, joined."""
        docs = [documentation_of(t) for t in self.types_with_keyword(keyword)]
        return '\n\n'.join(doc for doc in docs if doc)

    def signatures_of(self, keyword: str) -> list[ConceptSignature]:
        signatures = []
        for concept_type in self.types_with_keyword(keyword):
            parameters = members_of(concept_type)
            rendered = ' '.join(f'<{member_description(p)}>' for p in parameters)
            signatures.append(ConceptSignature(
                concept_type=concept_type,
                signature=f'{keyword_of(concept_type)} {rendered}'.rstrip(),
                documentation=documentation_of(concept_type),
                parameters=parameters,
            ))
        return signatures
