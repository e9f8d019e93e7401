"""
Mapping between absolute offsets and zero-based (line, character) positions.

Editors address text by ``(line, character)``; the analysis compares absolute
offsets.  :class:`TextDocument` is the only place converting between the two.
A line's characters are everything up to (not including) its ``\\n``.
"""
from __future__ import annotations

import bisect
from typing import NamedTuple


class LineChr(NamedTuple):
    line: int
    chr: int

    def __str__(self) -> str:
        return f'({self.line},{self.chr})'


LINE_CHR_ZERO = LineChr(0, 0)


class TextDocument:
    def __init__(self, text: str):
        self.text = text
        self._line_starts = [0]
        index = text.find('\n')
        while index != -1:
            self._line_starts.append(index + 1)
            index = text.find('\n', index + 1)

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def _line_length(self, line: int) -> int:
        start = self._line_starts[line]
        if line + 1 < len(self._line_starts):
            return self._line_starts[line + 1] - 1 - start
        return len(self.text) - start

    def get_position(self, line_chr: LineChr) -> int:
        """Absolute offset of *line_chr*, clamped to the document."""
        line, character = line_chr
        if line < 0:
            return 0
        if line >= self.line_count:
            return len(self.text)
        return self._line_starts[line] + max(0, min(character, self._line_length(line)))

    def get_line_chr(self, position: int) -> LineChr:
        """Zero-based ``(line, chr)`` of the absolute *position*, clamped."""
        position = max(0, min(position, len(self.text)))
        line = bisect.bisect_right(self._line_starts, position) - 1
        return LineChr(line, position - self._line_starts[line])

    def get_truncated_at_next_end_of_line(self, line_chr: LineChr) -> str:
        """Text up to and including the first line break at or after *line_chr*."""
        position = self.get_position(line_chr)
        end = self.text.find('\n', position)
        if end == -1:
            return self.text
        return self.text[:end + 1]

    def show_position(self, line_chr: LineChr) -> str:
        """Render the line of *line_chr* with a caret below the character (for logs)."""
        line_chr = self.get_line_chr(self.get_position(line_chr))
        start = self._line_starts[line_chr.line]
        line_text = self.text[start:start + self._line_length(line_chr.line)]
        return f'{line_text}\n{" " * line_chr.chr}^'
