"""
Dialect resolution for tslsp.

Determines whether an open document is parsed with the plain TypeScript
grammar (Dialect.TYPESCRIPT) or the TSX grammar (Dialect.TSX):

1. Explicit workspace configuration supplied by the LSP client via
   ``initializationOptions`` or ``workspace/didChangeConfiguration``.
2. A ``.tslsp.toml`` project config file in the workspace root.
3. URI suffix (``.tsx`` → TSX).
4. Default: ``Dialect.TYPESCRIPT``.

Resolved dialects are cached per document URI.  Changing the workspace-level
setting invalidates all cached entries.
"""
from __future__ import annotations

import enum
import logging
import tomllib
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

PROJECT_CONFIG = '.tslsp.toml'


class Dialect(enum.Enum):
    TYPESCRIPT = 'typescript'
    TSX = 'tsx'


def dialect_from_string(value: str | None) -> Dialect | None:
    """Convert a string like ``'tsx'`` or ``'TypeScript'`` to a :class:`Dialect`."""
    if not value:
        return None
    try:
        return Dialect(value.strip().lower())
    except ValueError:
        logger.warning('Unknown dialect %r ignored', value)
        return None


def _read_project_config(workspace_root: str | None) -> Dialect | None:
    """Parse ``.tslsp.toml`` in *workspace_root* and return the dialect, or None."""
    if not workspace_root:
        return None
    config_path = Path(workspace_root) / PROJECT_CONFIG
    if not config_path.exists():
        return None
    try:
        data = tomllib.loads(config_path.read_text(encoding='utf-8'))
    except (OSError, tomllib.TOMLDecodeError):
        logger.warning('Could not read %s', config_path, exc_info=True)
        return None
    return dialect_from_string(data.get('dialect'))


def _suffix_heuristic(uri: str) -> Dialect:
    suffix = PurePosixPath(urlparse(uri).path).suffix.lower()
    return Dialect.TSX if suffix == '.tsx' else Dialect.TYPESCRIPT


class DialectResolver:
    """Resolves and caches the :class:`Dialect` for each open document."""

    def __init__(self, workspace_root: str | None = None):
        self._workspace_root = workspace_root
        self._workspace_dialect: Dialect | None = None
        self._project_dialect = _read_project_config(workspace_root)
        self._by_uri: dict[str, Dialect] = {}

    def set_workspace_dialect(self, dialect: Dialect | None) -> None:
        """Set (or clear) an explicit workspace-level dialect override."""
        self._workspace_dialect = dialect
        self._by_uri.clear()

    def forget(self, uri: str) -> None:
        """Remove a document from the cache (called on ``textDocument/didClose``)."""
        self._by_uri.pop(uri, None)

    def resolve(self, uri: str) -> Dialect:
        if self._workspace_dialect is not None:
            return self._workspace_dialect
        if uri not in self._by_uri:
            self._by_uri[uri] = self._project_dialect or _suffix_heuristic(uri)
        return self._by_uri[uri]
