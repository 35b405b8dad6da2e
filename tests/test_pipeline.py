"""
Tests for the scrape pipeline orchestrator.

These tests drive the full five-step pipeline against the in-memory renderer
from conftest.py and check the emitted progress stream, the terminal record
and that the render session is released on every path.
"""

import asyncio

import pytest

from mgo_events.config import SUCCESSFUL_METHOD_NAME
from mgo_events.core.interfaces import (
    RecordSinkError,
    RendererError,
    RendererTimeoutError,
    RendererUnavailableError,
    ScraperError,
)
from mgo_events.core.models import (
    FinalRecord,
    PipelineStep,
    ProgressRecord,
    StepState,
    events_by_date_to_dict,
)
from mgo_events.core.services import (
    CancellationToken,
    FALLBACK_ERROR_MESSAGE,
    ScrapePipeline,
    StepTracker,
)

from conftest import FakePage, FakeRenderer, FakeSession, make_event_image, make_item


STEP_NAMES = ["acquire renderer", "load+wait", "extract", "normalize", "finalize"]


def states(record: ProgressRecord):
    return [step.state for step in record.methods]


def progress_values(records):
    return [record.progress for record in records if isinstance(record, ProgressRecord)]


async def wait_until(predicate, timeout=2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0.01)


class SessionPerLaunchRenderer(FakeRenderer):
    """Renderer handing a fresh session with a hanging page to every launch."""

    def __init__(self):
        super().__init__()
        self.sessions = []

    async def launch(self):
        self.launch_count += 1
        session = FakeSession(FakePage([], hang_on_selector=True))
        self.sessions.append(session)
        return session


# =============================================================================
# Step Tracker Tests
# =============================================================================

class TestStepTracker:
    """Tests for step bookkeeping."""

    def test_initial_snapshot_all_pending(self):
        tracker = StepTracker()
        snapshot = tracker.snapshot()
        assert [step.name for step in snapshot] == STEP_NAMES
        assert all(step.state is StepState.PENDING for step in snapshot)

    def test_cannot_skip_a_step(self):
        tracker = StepTracker()
        with pytest.raises(RuntimeError):
            tracker.start(PipelineStep.LOAD_AND_WAIT)

    def test_cannot_restart_a_step(self):
        tracker = StepTracker()
        tracker.start(PipelineStep.ACQUIRE_RENDERER)
        with pytest.raises(RuntimeError):
            tracker.start(PipelineStep.ACQUIRE_RENDERER)

    def test_snapshots_do_not_change_afterwards(self):
        tracker = StepTracker()
        tracker.start(PipelineStep.ACQUIRE_RENDERER)
        before = tracker.snapshot()
        tracker.succeed(PipelineStep.ACQUIRE_RENDERER, {'browserLaunched': True})

        assert before[0].state is StepState.RUNNING
        assert tracker.snapshot()[0].state is StepState.SUCCESS

    def test_fail_running(self):
        tracker = StepTracker()
        tracker.start(PipelineStep.ACQUIRE_RENDERER)
        tracker.succeed(PipelineStep.ACQUIRE_RENDERER)
        tracker.start(PipelineStep.LOAD_AND_WAIT)

        assert tracker.fail_running("timeout") is PipelineStep.LOAD_AND_WAIT
        assert tracker.running is None
        assert tracker.status(PipelineStep.LOAD_AND_WAIT).error == "timeout"
        assert tracker.fail_running("again") is None


# =============================================================================
# Successful Run
# =============================================================================

class TestSuccessfulRun:
    """A rendered page with a schedule container."""

    @pytest.mark.asyncio
    async def test_single_fragment_end_to_end(self, make_renderer, settings, record_sink):
        snapshot = [make_item("Events for 2025/05/29", [
            make_event_image("High Roller", "2025/05/29 01:00:00 - 2025/05/29 06:59:00",
                             "5 Minutes", "/i/highroller.png"),
        ])]
        pipeline = ScrapePipeline(make_renderer(snapshot), settings=settings)

        final = await pipeline.run(record_sink)

        assert final.success is True
        assert final.successful_method_name == SUCCESSFUL_METHOD_NAME
        assert final.error is None
        assert events_by_date_to_dict(final.events) == {
            "2025-05-29": [{
                'name': "High Roller",
                'startTime': "2025-05-29T01:00:00",
                'endTime': "2025-05-29T06:59:00",
                'duration': "5 Minutes",
                'category': "QuickEvent",
                'iconUrl': "https://monopolygo.game/i/highroller.png",
            }],
        }
        assert record_sink.records[-1] is final

    @pytest.mark.asyncio
    async def test_progress_checkpoints(self, make_renderer, settings, record_sink, schedule_snapshot):
        await ScrapePipeline(make_renderer(schedule_snapshot), settings=settings).run(record_sink)

        records = record_sink.records
        assert progress_values(records) == [10, 25, 50, 75, 90, 100]
        assert sum(isinstance(record, FinalRecord) for record in records) == 1
        assert isinstance(records[-1], FinalRecord)

    @pytest.mark.asyncio
    async def test_one_step_running_at_a_time(self, make_renderer, settings, record_sink, schedule_snapshot):
        await ScrapePipeline(make_renderer(schedule_snapshot), settings=settings).run(record_sink)

        first = record_sink.records[0]
        assert states(first) == [StepState.RUNNING] + [StepState.PENDING] * 4
        for record in record_sink.records[:-1]:
            assert states(record).count(StepState.RUNNING) <= 1

    @pytest.mark.asyncio
    async def test_step_results(self, make_renderer, settings, record_sink, schedule_snapshot):
        await ScrapePipeline(make_renderer(schedule_snapshot), settings=settings).run(record_sink)

        last_progress = record_sink.records[-2]
        assert all(step.state is StepState.SUCCESS for step in last_progress.methods)
        assert all(step.duration_ms is not None and step.duration_ms >= 0 for step in last_progress.methods)
        assert [step.result for step in last_progress.methods] == [
            {'browserLaunched': True},
            {'pageLoaded': True},
            {'eventsFound': 3},
            {'totalEvents': 3, 'totalDates': 2},
            {'formatted': True},
        ]

    @pytest.mark.asyncio
    async def test_renderer_driven_with_settings(self, make_renderer, settings, record_sink, schedule_snapshot):
        renderer = make_renderer(schedule_snapshot)
        await ScrapePipeline(renderer, settings=settings).run(record_sink)

        session = renderer.session
        assert session.opened == [(settings.target_url, "networkidle", 30000)]
        assert session.page.calls == [
            ('wait_for_selector', settings.event_box_selector, 15000),
            ('wait_fixed', 0),
            ('evaluate_in_page', settings.event_box_selector),
        ]
        assert session.close_count == 1

    @pytest.mark.asyncio
    async def test_empty_container_succeeds(self, make_renderer, settings, record_sink):
        final = await ScrapePipeline(make_renderer([]), settings=settings).run(record_sink)
        assert final.success is True
        assert dict(final.events) == {}

    @pytest.mark.asyncio
    async def test_scrape_events(self, make_renderer, settings, schedule_snapshot):
        events = await ScrapePipeline(make_renderer(schedule_snapshot), settings=settings).scrape_events()
        assert list(events) == ["2025-05-29", "2025-05-30"]


# =============================================================================
# Renderer Unavailable
# =============================================================================

class TestRendererUnavailable:
    """No headless browser on this host."""

    @pytest.mark.asyncio
    async def test_sample_data_reported(self, unavailable_renderer, settings, record_sink):
        final = await ScrapePipeline(unavailable_renderer, settings=settings).run(record_sink)

        assert final.success is False
        assert final.is_degraded
        assert final.successful_method_name is None
        assert final.error == FALLBACK_ERROR_MESSAGE
        assert "not available" in final.error
        assert list(final.events) == ["2025-05-29", "2025-05-30"]
        assert 'successfulMethodName' not in final.to_dict()

    @pytest.mark.asyncio
    async def test_progress_stream(self, unavailable_renderer, settings, record_sink):
        await ScrapePipeline(unavailable_renderer, settings=settings).run(record_sink)

        records = record_sink.records
        assert progress_values(records) == [10, 100]
        assert states(records[1]) == [StepState.FAILED] + [StepState.PENDING] * 4

    @pytest.mark.asyncio
    async def test_other_launch_errors_do_not_fall_back(self, make_renderer, settings, record_sink):
        renderer = make_renderer(launch_error=RendererError("Browser launch failed: crashed"))
        final = await ScrapePipeline(renderer, settings=settings).run(record_sink)

        assert final.success is False
        assert final.events is None
        assert final.error == "Browser launch failed: crashed"

    @pytest.mark.asyncio
    async def test_unavailable_after_launch_does_not_fall_back(self, make_renderer, settings, record_sink):
        renderer = make_renderer([], open_error=RendererUnavailableError("gone"))
        final = await ScrapePipeline(renderer, settings=settings).run(record_sink)

        assert final.events is None
        assert renderer.session.close_count == 1

    @pytest.mark.asyncio
    async def test_scrape_events_raises(self, unavailable_renderer, settings):
        with pytest.raises(ScraperError):
            await ScrapePipeline(unavailable_renderer, settings=settings).scrape_events()


# =============================================================================
# Failures
# =============================================================================

class TestFailures:
    """Failures inside a step."""

    @pytest.mark.asyncio
    async def test_container_missing(self, make_renderer, settings, record_sink):
        renderer = make_renderer(None)
        final = await ScrapePipeline(renderer, settings=settings).run(record_sink)

        assert final.success is False
        assert final.events is None
        assert "Event box not found" in final.error

        last_progress = record_sink.records[-2]
        assert last_progress.progress == 100
        assert states(last_progress) == [
            StepState.SUCCESS, StepState.SUCCESS, StepState.FAILED, StepState.PENDING, StepState.PENDING,
        ]
        assert last_progress.methods[2].error == final.error
        assert renderer.session.close_count == 1

    @pytest.mark.asyncio
    async def test_navigation_timeout(self, make_renderer, settings, record_sink):
        renderer = make_renderer([], open_error=RendererTimeoutError("Navigation timed out"))
        final = await ScrapePipeline(renderer, settings=settings).run(record_sink)

        assert final.error == "Navigation timed out"
        assert progress_values(record_sink.records) == [10, 25, 100]
        assert states(record_sink.records[-2])[1] is StepState.FAILED
        assert renderer.session.close_count == 1

    @pytest.mark.asyncio
    async def test_selector_timeout(self, make_renderer, settings, record_sink):
        renderer = make_renderer([], selector_error=RendererTimeoutError("Selector did not appear"))
        final = await ScrapePipeline(renderer, settings=settings).run(record_sink)

        assert final.success is False
        assert states(record_sink.records[-2])[1] is StepState.FAILED

    @pytest.mark.asyncio
    async def test_close_failure_does_not_mask_outcome(self, make_renderer, settings, record_sink, schedule_snapshot):
        renderer = make_renderer(schedule_snapshot, close_error=RuntimeError("close failed"))
        final = await ScrapePipeline(renderer, settings=settings).run(record_sink)

        assert final.success is True
        assert renderer.session.close_count == 1

    @pytest.mark.asyncio
    async def test_close_failure_after_step_failure(self, make_renderer, settings, record_sink):
        renderer = make_renderer(None, close_error=RuntimeError("close failed"))
        final = await ScrapePipeline(renderer, settings=settings).run(record_sink)

        assert "Event box not found" in final.error

    @pytest.mark.asyncio
    async def test_error_without_message_uses_type_name(self, make_renderer, settings, record_sink):
        renderer = make_renderer([], evaluate_error=KeyError())
        final = await ScrapePipeline(renderer, settings=settings).run(record_sink)
        assert final.error == "KeyError"

    @pytest.mark.asyncio
    async def test_failing_sink_aborts_and_releases(self, make_renderer, settings, schedule_snapshot):
        renderer = make_renderer(schedule_snapshot)
        emitted = []

        async def sink(record):
            if len(emitted) == 2:
                raise ConnectionResetError("peer gone")
            emitted.append(record)

        with pytest.raises(RecordSinkError):
            await ScrapePipeline(renderer, settings=settings).run(sink)

        assert renderer.session.close_count == 1
        assert len(emitted) == 2

    @pytest.mark.asyncio
    async def test_pipeline_can_run_again(self, make_renderer, settings, record_sink):
        renderer = make_renderer([])
        pipeline = ScrapePipeline(renderer, settings=settings)

        await pipeline.run(record_sink)
        await pipeline.run(record_sink)

        assert renderer.launch_count == 2
        assert renderer.session.close_count == 2


# =============================================================================
# Cancellation
# =============================================================================

class TestCancellation:
    """Token and task cancellation."""

    @pytest.mark.asyncio
    async def test_cancelled_before_start(self, make_renderer, settings, record_sink):
        token = CancellationToken()
        token.cancel("Client disconnected")
        renderer = make_renderer([])

        final = await ScrapePipeline(renderer, settings=settings, token=token).run(record_sink)

        assert final.success is False
        assert final.events is None
        assert final.error == "Client disconnected"
        assert renderer.launch_count == 0
        assert states(record_sink.records[-2]) == [StepState.FAILED] + [StepState.PENDING] * 4

    @pytest.mark.asyncio
    async def test_cancel_during_wait(self, make_renderer, settings, record_sink):
        token = CancellationToken()
        renderer = make_renderer([], hang_on_selector=True)
        pipeline = ScrapePipeline(renderer, settings=settings, token=token)

        task = asyncio.ensure_future(pipeline.run(record_sink))
        await wait_until(lambda: renderer.session.page.calls)
        token.cancel()
        final = await asyncio.wait_for(task, timeout=2)

        assert final.success is False
        assert final.error == "Pipeline cancelled"
        assert states(record_sink.records[-2])[1] is StepState.FAILED
        assert renderer.session.close_count == 1

    @pytest.mark.asyncio
    async def test_task_cancellation_releases_session(self, make_renderer, settings, record_sink):
        renderer = make_renderer([], hang_on_selector=True)
        task = asyncio.ensure_future(ScrapePipeline(renderer, settings=settings).run(record_sink))
        await wait_until(lambda: renderer.session.page.calls)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert renderer.session.close_count == 1
        assert not any(isinstance(record, FinalRecord) for record in record_sink.records)

    @pytest.mark.asyncio
    async def test_pipeline_cancel_aborts_active_run(self, make_renderer, settings, record_sink):
        renderer = make_renderer([], hang_on_selector=True)
        pipeline = ScrapePipeline(renderer, settings=settings)

        task = asyncio.ensure_future(pipeline.run(record_sink))
        await wait_until(lambda: renderer.session.page.calls)
        pipeline.cancel("Client disconnected")
        final = await asyncio.wait_for(task, timeout=2)

        assert final.error == "Client disconnected"
        assert renderer.session.close_count == 1

    @pytest.mark.asyncio
    async def test_cancelled_run_does_not_affect_next_run(self, make_renderer, settings, record_sink):
        renderer = make_renderer([], hang_on_selector=True)
        pipeline = ScrapePipeline(renderer, settings=settings)

        task = asyncio.ensure_future(pipeline.run(record_sink))
        await wait_until(lambda: renderer.session.page.calls)
        pipeline.cancel()
        assert (await asyncio.wait_for(task, timeout=2)).success is False

        renderer.session.page.hang_on_selector = False
        final = await pipeline.run(record_sink)

        assert final.success is True
        assert renderer.launch_count == 2

    @pytest.mark.asyncio
    async def test_supplied_token_is_shared_by_every_run(self, make_renderer, settings, record_sink):
        token = CancellationToken()
        token.cancel()
        pipeline = ScrapePipeline(make_renderer([]), settings=settings, token=token)

        assert (await pipeline.run(record_sink)).success is False
        assert (await pipeline.run(record_sink)).success is False

    @pytest.mark.asyncio
    async def test_concurrent_runs_close_their_own_sessions(self, settings, record_sink):
        renderer = SessionPerLaunchRenderer()
        pipeline = ScrapePipeline(renderer, settings=settings)

        first = asyncio.ensure_future(pipeline.run(record_sink))
        await wait_until(lambda: len(renderer.sessions) == 1 and renderer.sessions[0].page.calls)
        second = asyncio.ensure_future(pipeline.run(record_sink))
        await wait_until(lambda: len(renderer.sessions) == 2 and renderer.sessions[1].page.calls)

        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first

        assert renderer.sessions[0].close_count == 1
        assert renderer.sessions[1].close_count == 0

        second.cancel()
        with pytest.raises(asyncio.CancelledError):
            await second

        assert renderer.sessions[1].close_count == 1

    @pytest.mark.asyncio
    async def test_guard_returns_result(self):
        async def value():
            return 42

        assert await CancellationToken().guard(value()) == 42

    @pytest.mark.asyncio
    async def test_cancel_is_idempotent(self):
        token = CancellationToken()
        token.cancel("first")
        token.cancel("second")
        assert token.reason == "first"
