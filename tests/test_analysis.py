"""Tests for rhlsp.analysis: cursor-relative analysis runs."""
from __future__ import annotations

from dataclasses import dataclass

import pytest

from rhlsp.analysis import CodeAnalysisRun
from rhlsp.dsl.concepts import ConceptInfo, key_field
from rhlsp.dsl import default_concepts as dc
from rhlsp.text import LineChr, TextDocument

ENTITY_BOOK = 'Entity Book { ShortString Name; }'


def _run(dsl_context, text, line_chr=None):
    run = CodeAnalysisRun(TextDocument(text), dsl_context)
    if line_chr is None:
        return run.run_for_document()
    return run.run_for_position(line_chr)


class TestCodeAnalysisRun:
    def test_keyword_and_context_at_cursor(self, dsl_context):
        analysis = _run(dsl_context, ENTITY_BOOK, LineChr(0, 19))
        assert analysis.successful_run
        assert analysis.keyword_token.value == 'ShortString'
        assert [type(c) for c in analysis.concept_context] == [dc.EntityInfo]
        assert analysis.concept_context[0].name == 'Book'
        assert [type(c) for c in analysis.valid_concepts] == [dc.ShortStringPropertyInfo]
        assert analysis.all_errors == []

    def test_active_parameter(self, dsl_context):
        analysis = _run(dsl_context, ENTITY_BOOK, LineChr(0, 19))
        [(concept, active)] = analysis.get_valid_concepts_with_active_parameter()
        assert type(concept) is dc.ShortStringPropertyInfo
        assert active == 1

    def test_next_keyword_token(self, dsl_context):
        analysis = _run(dsl_context, 'Entity Book; Entity Author;', LineChr(0, 8))
        assert analysis.keyword_token.position == 0
        assert analysis.next_keyword_token is not None
        assert analysis.next_keyword_token.position > 8

    def test_no_keyword_between_statements(self, dsl_context):
        analysis = _run(dsl_context, 'Entity Book;\n\nEntity Author;', LineChr(1, 0))
        assert analysis.keyword_token is None

    def test_empty_document(self, dsl_context):
        analysis = _run(dsl_context, '')
        assert analysis.successful_run
        assert analysis.keyword_token is None
        assert analysis.concept_context == ()
        assert len(analysis.tokens) == 1

    def test_text_after_cursor_line_is_ignored(self, dsl_context):
        analysis = _run(dsl_context, 'Entity Book;\nFoo Bar;\n', LineChr(0, 3))
        assert analysis.all_errors == []
        whole = _run(dsl_context, 'Entity Book;\nFoo Bar;\n')
        assert len(whole.parser_errors) == 1
        assert whole.parser_errors[0].line_chr == LineChr(1, 0)

    def test_run_only_once(self, dsl_context):
        run = CodeAnalysisRun(TextDocument(ENTITY_BOOK), dsl_context)
        run.run_for_document()
        with pytest.raises(RuntimeError):
            run.run_for_document()

    def test_requires_initialized_context(self):
        from rhlsp.context import DslContext
        run = CodeAnalysisRun(TextDocument(ENTITY_BOOK), DslContext())
        with pytest.raises(RuntimeError):
            run.run_for_document()


class TestTokenLookups:
    def test_token_at_position(self, dsl_context):
        analysis = _run(dsl_context, ENTITY_BOOK)
        assert analysis.get_token_at_position(LineChr(0, 8)).value == 'Book'
        assert analysis.get_token_at_position(LineChr(0, 11)) is None   # space after Book
        assert analysis.get_token_at_position(LineChr(0, 33)) is None   # end of text

    def test_token_being_typed_includes_end(self, dsl_context):
        analysis = _run(dsl_context, ENTITY_BOOK)
        assert analysis.get_token_being_typed_at_cursor(LineChr(0, 11)).value == 'Book'
        assert analysis.get_token_being_typed_at_cursor(LineChr(0, 13)).value == '{'

    def test_no_token_being_typed_after_whitespace(self, dsl_context):
        analysis = _run(dsl_context, 'Entity  Book;')
        assert analysis.get_token_being_typed_at_cursor(LineChr(0, 7)) is None


class TestComments:
    def test_inside_comment(self, dsl_context):
        analysis = _run(dsl_context, '// Entity\nEntity Book;', LineChr(0, 5))
        assert analysis.is_inside_comment
        assert analysis.keyword_token is None

    def test_at_end_of_line_comment(self, dsl_context):
        analysis = _run(dsl_context, 'Entity Book; // note\nEntity Author;', LineChr(0, 20))
        assert analysis.is_inside_comment

    def test_before_comment(self, dsl_context):
        analysis = _run(dsl_context, 'Entity Book; // note', LineChr(0, 8))
        assert not analysis.is_inside_comment
        assert analysis.keyword_token.value == 'Entity'

    def test_line_after_comment(self, dsl_context):
        analysis = _run(dsl_context, '// header\nEntity Book;', LineChr(1, 8))
        assert not analysis.is_inside_comment
        assert analysis.keyword_token.value == 'Entity'


class TestErrors:
    def test_unterminated_string_reports_one_error(self, dsl_context):
        text = "Entity Book { ShortString 'Name"
        analysis = _run(dsl_context, text)
        assert len(analysis.tokenizer_errors) == 1
        assert analysis.parser_errors == ()
        assert analysis.all_errors[0].line_chr == LineChr(0, text.index("'"))

    def test_parser_error_position(self, dsl_context):
        analysis = _run(dsl_context, 'Entity Book { Foo Bar; }')
        [error] = analysis.all_errors
        assert error.line_chr == LineChr(0, 14)
        assert "'Foo'" in error.message

    def test_after_error_line(self, dsl_context):
        analysis = _run(dsl_context, 'Entity Book;\nFoo Bar;\nEntity Author;')
        assert not analysis.is_after_any_error_line(LineChr(0, 5))
        assert analysis.is_after_any_error_line(LineChr(1, 0))
        assert analysis.is_after_any_error_line(LineChr(2, 3))


@dataclass
class UnresolvableInfo(ConceptInfo):
    """A concept whose field type cannot be resolved."""
    keyword = 'Unresolvable'
    name: 'MissingType' = key_field()


class TestUnexpectedFaults:
    def test_non_syntax_exception_becomes_error_at_start(self):
        from rhlsp.context import DslContext
        context = DslContext()
        context.initialize_from_types([UnresolvableInfo])
        analysis = _run(context, 'Unresolvable Thing;')
        assert analysis.successful_run
        assert analysis.tokenizer_errors == ()
        [error] = analysis.parser_errors
        assert error.line_chr == LineChr(0, 0)
