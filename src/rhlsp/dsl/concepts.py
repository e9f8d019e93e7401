"""
Concept metadata.

A *concept* is one kind of DSL statement.  Concept types are dataclasses
deriving from :class:`ConceptInfo`; their fields, in declaration order, are the
parameters written after the keyword::

    @dataclass
    class EntityInfo(ConceptInfo):
        \"\"\"A persisted data structure.\"\"\"
        keyword = 'Entity'
        name: str | None = key_field()

Fields declared with :func:`key_field` form the concept's key, the part
written when another concept refers to it.  A field typed with another concept
is a reference.  When it is the first field and the enclosing concept in the
script is of that type, it is taken from the context
(``Entity Book { ShortString Title; }``); otherwise its key is written inline,
dot-separated from the key fields that follow (``ShortString Book.Title;``).
"""
from __future__ import annotations

import dataclasses
import inspect
import types
import typing
from dataclasses import dataclass
from functools import lru_cache
from typing import ClassVar


class ConceptInfo:
    """Base class of all concept types."""
    keyword: ClassVar[str | None] = None


@dataclass(frozen=True)
class ConceptMember:
    name: str
    type: type
    index: int
    is_key: bool = False

    @property
    def is_concept(self) -> bool:
        return is_concept_type(self.type)


def key_field(default=None):
    """Declare a concept field that is part of the concept's key."""
    return dataclasses.field(default=default, metadata={'key': True})


def is_concept_type(value) -> bool:
    return inspect.isclass(value) and issubclass(value, ConceptInfo)


def _unwrap_optional(hint):
    """Return ``X`` for ``X | None`` / ``Optional[X]``, *hint* otherwise."""
    if typing.get_origin(hint) in (typing.Union, types.UnionType):
        args = [a for a in typing.get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


@lru_cache(maxsize=None)
def members_of(concept_type: type) -> tuple[ConceptMember, ...]:
    """Return the parsable members of *concept_type* in declaration order."""
    if not dataclasses.is_dataclass(concept_type):
        return ()
    hints = typing.get_type_hints(concept_type)
    return tuple(
        ConceptMember(name=f.name, type=_unwrap_optional(hints[f.name]), index=i,
                      is_key=bool(f.metadata.get('key')))
        for i, f in enumerate(dataclasses.fields(concept_type))
    )


def keyword_of(concept_type: type) -> str | None:
    """Return the keyword declared directly on *concept_type* (not inherited)."""
    return concept_type.__dict__.get('keyword')


def type_description(value_type: type) -> str:
    if is_concept_type(value_type):
        return keyword_of(value_type) or value_type.__name__.removesuffix('Info')
    if value_type is str:
        return 'string'
    return value_type.__name__


def member_description(member: ConceptMember) -> str:
    """Human-readable parameter label, e.g. ``'Entity entity'``."""
    return f'{type_description(member.type)} {member.name}'


def documentation_of(concept_type: type) -> str:
    doc = concept_type.__doc__ or ''
    # @dataclass fills a missing docstring with the constructor signature
    if doc == concept_type.__name__ or doc.startswith(concept_type.__name__ + '('):
        return ''
    return inspect.cleandoc(doc)
