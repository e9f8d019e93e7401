"""
The DSL context: concept types known to the server.

Loading concept modules can be slow, so the server initializes the context in
a worker thread.  Until :attr:`DslContext.is_initialized` turns true every
query degrades to an empty answer.  The context is read-only afterwards.
"""
from __future__ import annotations

import importlib
import inspect
import logging
from typing import Iterable

from rhlsp.dsl.concepts import ConceptInfo
from rhlsp.dsl.queries import ConceptQueries

logger = logging.getLogger(__name__)

DEFAULT_CONCEPT_MODULES = ('rhlsp.dsl.default_concepts',)


def _concept_types_in(module) -> list[type]:
    return [
        value for value in vars(module).values()
        if inspect.isclass(value) and issubclass(value, ConceptInfo)
        and value is not ConceptInfo and value.__module__ == module.__name__
    ]


class DslContext:
    def __init__(self):
        self._concept_types: tuple[type, ...] = ()
        self._queries = ConceptQueries(())
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def concept_types(self) -> tuple[type, ...]:
        return self._concept_types

    @property
    def queries(self) -> ConceptQueries:
        return self._queries

    @property
    def keywords(self) -> list[str]:
        return sorted({k for k in map(self._queries.keyword_of, self._concept_types) if k})

    def initialize_from_types(self, concept_types: Iterable[type]) -> None:
        if self._initialized:
            raise RuntimeError('DslContext is already initialized.')
        self._concept_types = tuple(dict.fromkeys(concept_types))
        self._queries = ConceptQueries(self._concept_types)
        self._initialized = True
        logger.info('DslContext initialized with %d concept types (%d keywords).',
                    len(self._concept_types), len(self.keywords))

    def initialize(self, module_names: Iterable[str] = DEFAULT_CONCEPT_MODULES) -> None:
        """Import *module_names* and register every concept type they define."""
        concept_types: list[type] = []
        for name in module_names:
            module = importlib.import_module(name)
            found = _concept_types_in(module)
            logger.debug('DslContext: %d concept types in %s', len(found), name)
            concept_types.extend(found)
        self.initialize_from_types(concept_types)
