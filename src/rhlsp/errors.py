"""Errors collected during analysis and published as diagnostics."""
from __future__ import annotations

import enum
from dataclasses import dataclass

from rhlsp.text import LINE_CHR_ZERO, LineChr


class Severity(enum.Enum):
    ERROR = 'error'
    WARNING = 'warning'


@dataclass(frozen=True)
class AnalysisError:
    line_chr: LineChr = LINE_CHR_ZERO
    message: str = ''
    severity: Severity = Severity.ERROR
