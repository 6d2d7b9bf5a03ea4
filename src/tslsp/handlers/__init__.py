"""handlers/__init__.py — re-export handler functions for convenience."""
from .diagnostics import collect_error_nodes, get_diagnostics

__all__ = ['collect_error_nodes', 'get_diagnostics']
