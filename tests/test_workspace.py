"""Tests for rhlsp.workspace and rhlsp.publisher: change tracking and publishing."""
from __future__ import annotations

import asyncio

from rhlsp.publisher import PublishDiagnosticsRunner
from rhlsp.workspace import DslWorkspace

URI = 'file:///tmp/books.rhe'
OTHER_URI = 'file:///tmp/authors.rhe'


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestDslWorkspace:
    def test_open_and_get(self, dsl_context):
        workspace = DslWorkspace(dsl_context)
        document = workspace.open_document(URI, 'Entity Book;')
        assert workspace.get_document(URI) is document
        assert document.text_document.text == 'Entity Book;'

    def test_update_unknown_document_opens_it(self, dsl_context):
        workspace = DslWorkspace(dsl_context)
        workspace.update_document(URI, 'Entity Book;')
        assert workspace.get_document(URI) is not None

    def test_updated_since(self, dsl_context):
        clock = FakeClock(1.0)
        workspace = DslWorkspace(dsl_context, clock=clock)
        workspace.open_document(URI, 'Entity Book;')
        clock.now = 2.0
        workspace.open_document(OTHER_URI, 'Entity Author;')
        assert sorted(workspace.get_updated_documents(0.5)) == [OTHER_URI, URI]
        assert workspace.get_updated_documents(1.5) == [OTHER_URI]
        assert workspace.get_updated_documents(2.5) == []

    def test_change_in_same_tick_counts_as_updated(self, dsl_context):
        clock = FakeClock(1.0)
        workspace = DslWorkspace(dsl_context, clock=clock)
        workspace.open_document(URI, 'Entity Book;')
        assert workspace.get_updated_documents(1.0) == [URI]

    def test_close(self, dsl_context):
        clock = FakeClock(1.0)
        workspace = DslWorkspace(dsl_context, clock=clock)
        workspace.open_document(URI, 'Entity Book;')
        clock.now = 3.0
        workspace.close_document(URI)
        assert workspace.get_document(URI) is None
        assert workspace.get_updated_documents(0.0) == []
        assert workspace.get_closed_documents(2.0) == [URI]

    def test_reopen_clears_closed_marker(self, dsl_context):
        clock = FakeClock(1.0)
        workspace = DslWorkspace(dsl_context, clock=clock)
        workspace.open_document(URI, 'Entity Book;')
        workspace.close_document(URI)
        workspace.open_document(URI, 'Entity Book;')
        assert workspace.get_closed_documents(0.0) == []

    def test_mark_all_updated(self, dsl_context):
        clock = FakeClock(1.0)
        workspace = DslWorkspace(dsl_context, clock=clock)
        workspace.open_document(URI, 'Entity Book;')
        workspace.open_document(OTHER_URI, 'Entity Author;')
        clock.now = 5.0
        workspace.mark_all_updated()
        assert sorted(workspace.get_updated_documents(4.0)) == [OTHER_URI, URI]


class TestPublishDiagnosticsRunner:
    def _setup(self, dsl_context):
        clock = FakeClock(1.0)
        workspace = DslWorkspace(dsl_context, clock=clock)
        published = []
        runner = PublishDiagnosticsRunner(workspace, published.append, clock=clock)
        return clock, workspace, runner, published

    def test_edits_within_one_cycle_publish_once(self, dsl_context):
        clock, workspace, runner, published = self._setup(dsl_context)
        workspace.open_document(URI, 'Entity Book;')
        clock.now = 2.0
        workspace.update_document(URI, 'Entity Book { Foo; }')
        clock.now = 3.0
        assert asyncio.run(runner.publish_cycle()) == 1
        [params] = published
        assert params.uri == URI
        assert len(params.diagnostics) == 1
        assert runner.last_publish_time == 3.0

    def test_no_changes_publish_nothing(self, dsl_context):
        clock, workspace, runner, published = self._setup(dsl_context)
        workspace.open_document(URI, 'Entity Book;')
        clock.now = 2.0
        asyncio.run(runner.publish_cycle())
        clock.now = 3.0
        assert asyncio.run(runner.publish_cycle()) == 0
        assert len(published) == 1

    def test_closed_document_gets_empty_diagnostics(self, dsl_context):
        clock, workspace, runner, published = self._setup(dsl_context)
        workspace.open_document(URI, 'Entity Book { Foo; }')
        clock.now = 2.0
        asyncio.run(runner.publish_cycle())
        clock.now = 3.0
        workspace.close_document(URI)
        clock.now = 4.0
        assert asyncio.run(runner.publish_cycle()) == 1
        assert published[-1].uri == URI
        assert published[-1].diagnostics == []

    def test_async_publish_callback_is_awaited(self, dsl_context):
        clock = FakeClock(1.0)
        workspace = DslWorkspace(dsl_context, clock=clock)
        published = []

        async def publish(params):
            await asyncio.sleep(0)
            published.append(params.uri)

        runner = PublishDiagnosticsRunner(workspace, publish, clock=clock)
        workspace.open_document(URI, 'Entity Book;')
        clock.now = 2.0
        asyncio.run(runner.publish_cycle())
        assert published == [URI]

    def test_loop_publishes_until_stopped(self, dsl_context):
        workspace = DslWorkspace(dsl_context)
        published = []
        runner = PublishDiagnosticsRunner(workspace, published.append, interval=0.01)

        async def scenario():
            workspace.open_document(URI, 'Entity Book;')
            runner.start()
            assert runner.is_running
            await asyncio.sleep(0.2)
            await runner.stop()

        asyncio.run(scenario())
        assert not runner.is_running
        assert [p.uri for p in published] == [URI]

    def test_stop_is_idempotent_and_final(self, dsl_context):
        workspace = DslWorkspace(dsl_context)
        runner = PublishDiagnosticsRunner(workspace, lambda params: None)

        async def scenario():
            await runner.stop()
            await runner.stop()
            runner.start()
            return runner.is_running

        assert asyncio.run(scenario()) is False

    def test_edit_during_dispatch_is_published_next_cycle(self, dsl_context):
        clock = FakeClock(1.0)
        workspace = DslWorkspace(dsl_context, clock=clock)
        published = []

        def publish(params):
            published.append(params)
            if len(published) == 1:
                # same clock reading as the cycle start
                workspace.update_document(URI, 'Entity Book { Foo; }')

        runner = PublishDiagnosticsRunner(workspace, publish, clock=clock)
        workspace.open_document(URI, 'Entity Book;')
        assert asyncio.run(runner.publish_cycle()) == 1
        assert published[0].diagnostics == []

        clock.now = 2.0
        assert asyncio.run(runner.publish_cycle()) == 1
        assert len(published[1].diagnostics) == 1

    def test_loop_continues_after_failing_cycle(self, dsl_context):
        workspace = DslWorkspace(dsl_context)
        calls = []

        def publish(params):
            calls.append(params.uri)
            if len(calls) == 1:
                raise RuntimeError('client went away')

        runner = PublishDiagnosticsRunner(workspace, publish, interval=0.01)

        async def scenario():
            workspace.open_document(URI, 'Entity Book;')
            runner.start()
            await asyncio.sleep(0.2)
            still_running = runner.is_running
            await runner.stop()
            return still_running

        assert asyncio.run(scenario()) is True
        assert calls == [URI, URI]
