"""
Per-document syntax trees, kept in sync with the editor incrementally.

Each open document is stored as a ``DocumentContext`` holding the current text
and the tree-sitter tree parsed from exactly that text.  Change notifications
are applied one content change at a time: the change is translated into edit
coordinates against the current text, the current tree is told about the
edit, and the new text is reparsed with the edited tree as a reuse hint.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache

import tree_sitter_typescript
from lsprotocol import types as lsp
from pygls.workspace import PositionCodec
from tree_sitter import Language, Parser, Tree

from tslsp.dialect import Dialect
from tslsp.edits import full_range, translate_edit

logger = logging.getLogger(__name__)

# LSP default position encoding, used until the client negotiates another.
UTF16 = PositionCodec(lsp.PositionEncodingKind.Utf16)


class UnknownDocumentError(KeyError):
    """Raised when a URI has no open document."""


@lru_cache(maxsize=2)
def _parser(dialect: Dialect) -> Parser:
    """Return the parser for *dialect* (cached, one per grammar)."""
    if dialect is Dialect.TSX:
        language = Language(tree_sitter_typescript.language_tsx())
    else:
        language = Language(tree_sitter_typescript.language_typescript())
    return Parser(language)


@dataclass
class DocumentContext:
    uri: str
    text: str
    tree: Tree
    dialect: Dialect = Dialect.TYPESCRIPT


def parse_document(uri: str, text: str, dialect: Dialect = Dialect.TYPESCRIPT) -> DocumentContext:
    """Parse *text* from scratch and return a fresh :class:`DocumentContext`."""
    tree = _parser(dialect).parse(text.encode('utf-8'))
    return DocumentContext(uri=uri, text=text, tree=tree, dialect=dialect)


def apply_changes(ctx: DocumentContext, changes: Iterable, codec: PositionCodec = UTF16) -> Tree:
    """Apply LSP content changes to *ctx* in order and return the final tree.

    Every change is translated against the text left by the previous one,
    including the conversion of its range from client units with *codec*.
    A change without a ``range`` replaces the whole document.
    """
    parser = _parser(ctx.dialect)
    for change in changes:
        rng = getattr(change, 'range', None)
        if rng is None:
            rng = full_range(ctx.text)
        else:
            rng = codec.range_from_client_units(ctx.text.split('\n'), rng)
        coords, text = translate_edit(
            ctx.text, rng, change.text, getattr(change, 'range_length', None),
            units=codec.client_num_units,
        )
        ctx.tree.edit(**coords.as_edit_kwargs())
        tree = parser.parse(text.encode('utf-8'), ctx.tree)
        ctx.text, ctx.tree = text, tree
    return ctx.tree


class DocumentStore:
    """Open documents keyed by URI."""

    def __init__(self):
        self._contexts: dict[str, DocumentContext] = {}

    def open(self, uri: str, text: str, dialect: Dialect = Dialect.TYPESCRIPT) -> DocumentContext:
        if uri in self._contexts:
            logger.warning('%s opened twice, replacing the previous state', uri)
        ctx = parse_document(uri, text, dialect)
        self._contexts[uri] = ctx
        return ctx

    def get(self, uri: str) -> DocumentContext:
        try:
            return self._contexts[uri]
        except KeyError:
            raise UnknownDocumentError(uri) from None

    def close(self, uri: str) -> None:
        if self._contexts.pop(uri, None) is None:
            raise UnknownDocumentError(uri)

    def __contains__(self, uri: str) -> bool:
        return uri in self._contexts

    def __len__(self) -> int:
        return len(self._contexts)
