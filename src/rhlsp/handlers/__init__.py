"""handlers/__init__.py: re-export handler functions for convenience."""
from .diagnostics import get_diagnostics
from .completion import get_completions
from .hover import get_hover
from .signature_help import get_signature_help

__all__ = ['get_diagnostics', 'get_completions', 'get_hover', 'get_signature_help']
