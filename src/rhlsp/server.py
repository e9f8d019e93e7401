"""
rhlsp Language Server.

Registers LSP capabilities and wires the analysis-backed handlers.  Diagnostics
are not published from the change handlers; the ``PublishDiagnosticsRunner``
picks up changed documents on its own schedule.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from pygls.lsp.server import LanguageServer
from lsprotocol import types as lsp

from rhlsp import __version__
from rhlsp.config import ServerSettings, apply_log_level, load_settings
from rhlsp.context import DslContext
from rhlsp.handlers import get_completions, get_hover, get_signature_help
from rhlsp.publisher import PublishDiagnosticsRunner
from rhlsp.workspace import DslWorkspace

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Server instance + per-session state
# ---------------------------------------------------------------------------

server = LanguageServer(
    'rhlsp', __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)

dsl_context = DslContext()
workspace = DslWorkspace(dsl_context)

_settings = ServerSettings()
_overrides: dict = {}
_runner: PublishDiagnosticsRunner | None = None

# Loading concept modules may be slow; keep it off the event loop.
_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='rhlsp-init')


def configure(overrides: dict) -> None:
    """Set options taken from the command line; applied on ``initialize``."""
    global _overrides
    _overrides = dict(overrides)


def _publish(params: lsp.PublishDiagnosticsParams) -> None:
    server.text_document_publish_diagnostics(params)


def _initialize_context(module_names: tuple[str, ...]) -> None:
    """Load the concept types, then republish every open document.

    Runs in the executor thread.
    """
    if dsl_context.is_initialized:
        return
    logger.info('Initializing DslContext from %s.', ', '.join(module_names))
    try:
        dsl_context.initialize(module_names)
    except Exception:
        logger.error('DslContext initialization failed.', exc_info=True)
        return
    workspace.mark_all_updated()


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

@server.feature(lsp.INITIALIZE)
def on_initialize(params: lsp.InitializeParams):
    global _settings, _runner
    workspace_root = None
    if params.root_uri:
        # Strip the file:// scheme for local path use
        uri = params.root_uri
        workspace_root = uri[7:] if uri.startswith('file://') else uri

    opts = getattr(params, 'initialization_options', None)
    _settings = load_settings(workspace_root, opts, _overrides)
    apply_log_level(_settings.log_level)

    _runner = PublishDiagnosticsRunner(workspace, _publish, interval=_settings.publish_interval)
    _executor.submit(_initialize_context, _settings.concept_modules)


@server.feature(lsp.INITIALIZED)
def on_initialized(params: lsp.InitializedParams):
    if _runner is not None:
        _runner.start()


@server.feature(lsp.SHUTDOWN)
async def on_shutdown(params):
    if _runner is not None:
        await _runner.stop()


@server.feature(lsp.WORKSPACE_DID_CHANGE_CONFIGURATION)
def did_change_configuration(params: lsp.DidChangeConfigurationParams):
    """Handle live config changes (e.g. user changes ``rhlsp.logLevel`` in VS Code)."""
    settings = getattr(params, 'settings', None) or {}
    if isinstance(settings, dict):
        apply_log_level(settings.get('rhlsp', {}).get('logLevel'))


# ---------------------------------------------------------------------------
# Text document synchronisation
# ---------------------------------------------------------------------------

@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams):
    td = params.text_document
    workspace.open_document(td.uri, td.text)


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams):
    uri = params.text_document.uri
    workspace.update_document(uri, params.content_changes[-1].text)


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams):
    workspace.close_document(params.text_document.uri)


# ---------------------------------------------------------------------------
# Completion, hover, signature help
# ---------------------------------------------------------------------------

@server.feature(lsp.TEXT_DOCUMENT_COMPLETION)
def completion(params: lsp.CompletionParams) -> lsp.CompletionList | None:
    document = workspace.get_document(params.text_document.uri)
    if document is None:
        return None
    items = get_completions(document, params.position)
    return lsp.CompletionList(is_incomplete=False, items=items)


@server.feature(lsp.TEXT_DOCUMENT_HOVER)
def hover(params: lsp.HoverParams) -> lsp.Hover | None:
    document = workspace.get_document(params.text_document.uri)
    if document is None:
        return None
    return get_hover(document, params.position)


@server.feature(
    lsp.TEXT_DOCUMENT_SIGNATURE_HELP,
    lsp.SignatureHelpOptions(trigger_characters=['.', ' ', ';', '{']),
)
def signature_help(params: lsp.SignatureHelpParams) -> lsp.SignatureHelp | None:
    logger.info('SignatureHelp requested.')
    document = workspace.get_document(params.text_document.uri)
    if document is None:
        return None
    return get_signature_help(document, params.position)
