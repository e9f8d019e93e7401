"""Tests for rhlsp.dsl.tokenizer and the error-capturing wrappers in rhlsp.tokens."""
from __future__ import annotations

import pytest

from rhlsp.dsl.tokenizer import DslSyntaxError, TokenType, scan, tokenize
from rhlsp.text import LineChr, TextDocument


class TestTokenize:
    def test_basic_statement(self):
        tokens = tokenize('Entity Book { ShortString Name; }')
        assert [(t.type, t.value, t.position) for t in tokens] == [
            (TokenType.TEXT, 'Entity', 0),
            (TokenType.TEXT, 'Book', 7),
            (TokenType.SPECIAL, '{', 12),
            (TokenType.TEXT, 'ShortString', 14),
            (TokenType.TEXT, 'Name', 26),
            (TokenType.SPECIAL, ';', 30),
            (TokenType.SPECIAL, '}', 32),
            (TokenType.END_OF_FILE, '', 33),
        ]

    def test_empty_text_is_only_end_of_file(self):
        tokens = tokenize('')
        assert len(tokens) == 1
        assert tokens[0].type is TokenType.END_OF_FILE
        assert tokens[0].position == 0

    def test_comments_are_skipped(self):
        tokens = tokenize('// header\nEntity Book; // trailing')
        assert [t.value for t in tokens if t.type is TokenType.TEXT] == ['Entity', 'Book']

    def test_string_value_is_unquoted(self):
        tokens = tokenize("DefaultValue Book.Code 'it''s';")
        string = next(t for t in tokens if t.type is TokenType.STRING)
        assert string.value == "it's"
        assert string.length == len("'it''s'")

    def test_double_quoted_string(self):
        tokens = tokenize('ItemFilter Active "item => item.Active";')
        string = next(t for t in tokens if t.type is TokenType.STRING)
        assert string.value == 'item => item.Active'

    def test_dotted_key(self):
        tokens = tokenize('Required Book.Title;')
        assert [t.value for t in tokens[:-1]] == ['Required', 'Book', '.', 'Title', ';']


class TestTokenizeErrors:
    def test_unterminated_string(self):
        text = "Entity Book { ShortString 'Name"
        with pytest.raises(DslSyntaxError) as excinfo:
            tokenize(text)
        error = excinfo.value
        assert error.position == text.index("'")
        assert 'Missing closing' in error.simple_message

    def test_partial_tokens_end_at_error(self):
        text = "Entity Book { ShortString 'Name"
        with pytest.raises(DslSyntaxError) as excinfo:
            tokenize(text)
        tokens = excinfo.value.tokens
        assert [t.value for t in tokens[:-1]] == ['Entity', 'Book', '{', 'ShortString']
        assert tokens[-1].type is TokenType.END_OF_FILE
        assert tokens[-1].position == text.index("'")

    def test_unexpected_character(self):
        with pytest.raises(DslSyntaxError) as excinfo:
            tokenize('Entity Bo#ok;')
        assert excinfo.value.position == 9
        assert "'#'" in excinfo.value.simple_message


class TestScan:
    def test_comment_token_span_includes_marker(self):
        text = 'Entity Book; // note'
        comments = [t for t in scan(text) if t.type is TokenType.COMMENT]
        assert len(comments) == 1
        comment = comments[0]
        assert comment.value == ' note'
        assert comment.position == text.index('//')
        assert comment.end == len(text)

    def test_scan_has_no_end_of_file_token(self):
        assert all(t.type is not TokenType.END_OF_FILE for t in scan('Entity Book;'))


class TestTokenizeWithErrors:
    def test_valid_text_has_no_errors(self):
        from rhlsp.tokens import tokenize_with_errors
        tokens, errors = tokenize_with_errors(TextDocument('Entity Book;'))
        assert errors == []
        assert tokens[-1].type is TokenType.END_OF_FILE

    def test_error_is_positioned(self):
        from rhlsp.tokens import tokenize_with_errors
        tokens, errors = tokenize_with_errors(TextDocument("Entity Book;\nEntity 'Author"))
        assert len(errors) == 1
        assert errors[0].line_chr == LineChr(1, 7)
        assert [t.value for t in tokens[:-1]] == ['Entity', 'Book', ';', 'Entity']

    def test_comment_scan_stops_at_malformed_input(self):
        from rhlsp.tokens import scan_comment_tokens
        comments = scan_comment_tokens("// first\nEntity 'Book\n// second")
        assert [c.value for c in comments] == [' first']
