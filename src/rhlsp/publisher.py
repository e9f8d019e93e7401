"""
Periodic diagnostics publishing.

Instead of publishing on every keystroke, a background task wakes up every
``interval`` seconds, collects the documents changed or closed since the last
successful publish and sends one ``textDocument/publishDiagnostics``
notification per document.  Several edits within one interval therefore
produce a single publish of the latest text.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import Awaitable, Callable

from lsprotocol import types as lsp

from rhlsp.handlers.diagnostics import get_diagnostics
from rhlsp.workspace import DslWorkspace

logger = logging.getLogger(__name__)

CYCLE_INTERVAL = 0.3

PublishCallback = Callable[[lsp.PublishDiagnosticsParams], 'Awaitable[None] | None']


class PublishDiagnosticsRunner:
    def __init__(self, workspace: DslWorkspace, publish: PublishCallback,
                 interval: float = CYCLE_INTERVAL,
                 clock: Callable[[], float] = time.monotonic):
        self._workspace = workspace
        self._publish = publish
        self._interval = interval
        self._clock = clock
        self._stop_requested = False
        self._task: asyncio.Task | None = None
        self.last_publish_time = float('-inf')

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the publish loop on the running event loop."""
        if self._stop_requested or self.is_running:
            return
        logger.info('Starting PublishDiagnosticsRunner (interval %.3f s).', self._interval)
        self._task = asyncio.ensure_future(self._publish_loop())

    async def stop(self) -> None:
        self._stop_requested = True
        task, self._task = self._task, None
        if task is None:
            return
        logger.debug('Stopping PublishDiagnosticsRunner.')
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.debug('Publish loop successfully cancelled.')
        except Exception:
            logger.error('Publish loop faulted while waiting to cancel.', exc_info=True)

    async def _publish_loop(self) -> None:
        while not self._stop_requested:
            await asyncio.sleep(self._interval)
            try:
                await self.publish_cycle()
            except Exception:
                logger.warning('Error occurred during document diagnostics.', exc_info=True)

    async def publish_cycle(self) -> int:
        """Publish diagnostics for documents changed or closed since the last cycle.

        Returns the number of notifications sent.
        """
        cycle_start = self._clock()
        changed = self._workspace.get_updated_documents(self.last_publish_time)
        closed = self._workspace.get_closed_documents(self.last_publish_time)
        if not changed and not closed:
            return 0

        loop = asyncio.get_running_loop()
        all_params: list[lsp.PublishDiagnosticsParams] = []
        for uri in changed:
            params = await loop.run_in_executor(None, self._diagnostic_params, uri)
            if params is not None:
                all_params.append(params)
        for uri in closed:
            all_params.append(lsp.PublishDiagnosticsParams(uri=uri, diagnostics=[]))

        pending = []
        for params in all_params:
            logger.debug('Publish %d diagnostics for %s.', len(params.diagnostics), params.uri)
            result = self._publish(params)
            if inspect.isawaitable(result):
                pending.append(result)
        await asyncio.gather(*pending)

        logger.debug('Publish diagnostics complete for %d documents in %.2f ms.',
                     len(all_params), (self._clock() - cycle_start) * 1000)
        self.last_publish_time = cycle_start
        return len(all_params)

    def _diagnostic_params(self, uri: str) -> lsp.PublishDiagnosticsParams | None:
        document = self._workspace.get_document(uri)
        if document is None:
            return None
        analysis = document.get_analysis()
        return lsp.PublishDiagnosticsParams(uri=uri, diagnostics=get_diagnostics(analysis))
