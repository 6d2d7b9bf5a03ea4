"""Convert tree-sitter error and missing nodes into LSP Diagnostic objects."""
from __future__ import annotations

from lsprotocol import types as lsp
from pygls.workspace import PositionCodec

from tslsp.document import UTF16, DocumentContext

# Fixed so messages stay stable across grammar versions.
CLOSERS = {
    "'": "'",
    '"': '"',
    '`': '`',
    '{': '}',
    '[': ']',
    '(': ')',
}


def collect_error_nodes(node) -> list:
    """Return every ERROR or MISSING node under *node*, in pre-order.

    Error nodes are searched too, since recovery can nest them.
    """
    found = []
    if node.is_missing or node.is_error:
        found.append(node)
    for child in node.children:
        found.extend(collect_error_nodes(child))
    return found


def error_message(node) -> str:
    if node.is_missing:
        return f'Missing {node.type}'
    first = node.children[0] if node.children else None
    if first is not None and first.type in CLOSERS:
        return f'Expected closing {CLOSERS[first.type]}'
    return f'Unexpected {(first or node).type}'


def _position(lines: list[str], point) -> lsp.Position:
    """Map a tree-sitter (row, byte column) point to a string-index position."""
    row, byte_col = point
    line = lines[row] if row < len(lines) else ''
    character = len(line.encode('utf-8')[:byte_col].decode('utf-8', errors='ignore'))
    return lsp.Position(line=row, character=character)


def format_diagnostic(node, lines: list[str], codec: PositionCodec = UTF16) -> lsp.Diagnostic:
    rng = lsp.Range(
        start=_position(lines, node.start_point),
        end=_position(lines, node.end_point),
    )
    return lsp.Diagnostic(
        range=codec.range_to_client_units(lines, rng),
        message=error_message(node),
        severity=lsp.DiagnosticSeverity.Error,
        source='parse',
    )


def get_diagnostics(ctx: DocumentContext, codec: PositionCodec = UTF16) -> list[lsp.Diagnostic]:
    """Return LSP ``Diagnostic`` objects for every syntax error in *ctx*.

    Positions are expressed in the client's units as given by *codec*.
    """
    lines = ctx.text.split('\n')
    return [format_diagnostic(node, lines, codec)
            for node in collect_error_nodes(ctx.tree.root_node)]
