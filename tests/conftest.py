from __future__ import annotations

import pytest


@pytest.fixture
def dsl_context():
    """A context loaded with the built-in concepts."""
    from rhlsp.context import DslContext
    context = DslContext()
    context.initialize()
    return context


@pytest.fixture
def make_document(dsl_context):
    from rhlsp.document import DslDocument

    def _make(text: str):
        return DslDocument(dsl_context, text)
    return _make
