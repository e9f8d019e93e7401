"""Conversions between LSP positions and analysis positions."""
from __future__ import annotations

from lsprotocol import types as lsp

from rhlsp.text import LineChr


def to_line_chr(position: lsp.Position) -> LineChr:
    return LineChr(position.line, position.character)


def to_lsp_position(line_chr: LineChr) -> lsp.Position:
    return lsp.Position(line=line_chr.line, character=line_chr.chr)
