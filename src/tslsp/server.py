"""
tslsp Language Server.

Keeps a tree-sitter tree per open document, updates it incrementally from
range-based change notifications and publishes the tree's syntax errors as
diagnostics after every open and change.
"""
from __future__ import annotations

import logging

from pygls.lsp.server import LanguageServer
from pygls.workspace import PositionCodec
from lsprotocol import types as lsp

logger = logging.getLogger(__name__)

from tslsp import __version__
from tslsp.dialect import DialectResolver, dialect_from_string
from tslsp.document import DocumentContext, DocumentStore, UnknownDocumentError, apply_changes
from tslsp.handlers import get_diagnostics

# ---------------------------------------------------------------------------
# Server instance + per-session state
# ---------------------------------------------------------------------------

server = LanguageServer(
    'tslsp', __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Incremental,
)

# Per-URI text + tree (populated on open, dropped on close).
_docs = DocumentStore()

# Dialect resolver — single instance, replaced on initialize.
_resolver = DialectResolver()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _position_codec() -> PositionCodec:
    """Codec for the position encoding negotiated with the client."""
    return server.workspace.position_codec


def _publish_diagnostics(ctx: DocumentContext) -> None:
    diags = get_diagnostics(ctx, _position_codec())
    logger.debug('_publish_diagnostics: %s → %d diagnostics', ctx.uri, len(diags))
    server.text_document_publish_diagnostics(
        lsp.PublishDiagnosticsParams(uri=ctx.uri, diagnostics=diags)
    )


def _option(options, key: str):
    """Read *key* from a dict or attribute-style options object."""
    if options is None:
        return None
    if isinstance(options, dict):
        return options.get(key)
    return getattr(options, key, None)


def _apply_log_level(raw: str | None) -> None:
    """Set the root logger level from a string like 'debug', 'warning', etc."""
    if not raw:
        return
    level = getattr(logging, raw.upper(), None)
    if isinstance(level, int):
        logging.getLogger().setLevel(level)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

@server.feature(lsp.INITIALIZE)
def on_initialize(params: lsp.InitializeParams):
    global _resolver
    workspace_root = None
    if params.root_uri:
        uri = params.root_uri
        workspace_root = uri[7:] if uri.startswith('file://') else uri

    _resolver = DialectResolver(workspace_root=workspace_root)

    opts = getattr(params, 'initialization_options', None)
    dialect = dialect_from_string(_option(opts, 'dialect'))
    if dialect is not None:
        _resolver.set_workspace_dialect(dialect)
    _apply_log_level(_option(opts, 'logLevel'))


@server.feature(lsp.WORKSPACE_DID_CHANGE_CONFIGURATION)
def did_change_configuration(params: lsp.DidChangeConfigurationParams):
    """Handle live config changes (``tslsp.dialect`` / ``tslsp.logLevel``)."""
    settings = getattr(params, 'settings', None) or {}
    if isinstance(settings, dict):
        tslsp = settings.get('tslsp') or {}
        if 'dialect' in tslsp:
            # None or an unknown name clears the override
            _resolver.set_workspace_dialect(dialect_from_string(tslsp['dialect']))
        _apply_log_level(tslsp.get('logLevel'))


@server.feature(lsp.WORKSPACE_DID_CHANGE_WORKSPACE_FOLDERS)
def did_change_workspace_folders(params: lsp.DidChangeWorkspaceFoldersParams):
    logger.info('Workspace folder change event received.')


# ---------------------------------------------------------------------------
# Text document synchronisation
# ---------------------------------------------------------------------------

@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams):
    td = params.text_document
    ctx = _docs.open(td.uri, td.text, _resolver.resolve(td.uri))
    logger.debug('%s opened. Tree: %s', td.uri, ctx.tree.root_node)
    _publish_diagnostics(ctx)


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams):
    uri = params.text_document.uri
    try:
        ctx = _docs.get(uri)
    except UnknownDocumentError:
        logger.warning('did_change: %s is not open, ignoring', uri)
        return
    tree = apply_changes(ctx, params.content_changes, _position_codec())
    logger.debug('%s changed. Tree: %s', uri, tree.root_node)
    _publish_diagnostics(ctx)


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams):
    uri = params.text_document.uri
    _resolver.forget(uri)
    try:
        _docs.close(uri)
    except UnknownDocumentError:
        logger.warning('did_close: %s is not open, ignoring', uri)
        return
    logger.debug('%s closed.', uri)
