"""Concept DSL: tokenizer, concept metadata and keyword-driven parser."""
from .concepts import ConceptInfo, ConceptMember, keyword_of, members_of
from .parser import DslParser, ParseListener, TokenReader, ValueOrError
from .queries import ConceptQueries, ConceptSignature
from .tokenizer import DslSyntaxError, Token, TokenType, scan, tokenize

__all__ = [
    'ConceptInfo', 'ConceptMember', 'keyword_of', 'members_of',
    'DslParser', 'ParseListener', 'TokenReader', 'ValueOrError',
    'ConceptQueries', 'ConceptSignature',
    'DslSyntaxError', 'Token', 'TokenType', 'scan', 'tokenize',
]
