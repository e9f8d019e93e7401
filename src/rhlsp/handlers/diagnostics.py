"""Convert analysis errors into LSP Diagnostic objects."""
from __future__ import annotations

from lsprotocol import types as lsp

from rhlsp.analysis import AnalysisResult
from rhlsp.errors import AnalysisError, Severity
from rhlsp.handlers.positions import to_lsp_position

_SEVERITY = {
    Severity.ERROR: lsp.DiagnosticSeverity.Error,
    Severity.WARNING: lsp.DiagnosticSeverity.Warning,
}


def _diagnostic(analysis: AnalysisResult, error: AnalysisError) -> lsp.Diagnostic:
    # the range covers the token at the error position, if there is one
    end = error.line_chr
    token = analysis.get_token_at_position(error.line_chr)
    if token is not None:
        end = analysis.text_document.get_line_chr(token.end)
    return lsp.Diagnostic(
        range=lsp.Range(start=to_lsp_position(error.line_chr), end=to_lsp_position(end)),
        message=error.message,
        severity=_SEVERITY[error.severity],
        source='rhlsp',
    )


def get_diagnostics(analysis: AnalysisResult) -> list[lsp.Diagnostic]:
    """Return LSP ``Diagnostic`` objects for every error in *analysis*."""
    return [_diagnostic(analysis, error) for error in analysis.all_errors]
