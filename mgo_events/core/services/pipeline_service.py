"""
Scrape pipeline orchestrator.

Runs the five pipeline steps strictly in sequence, tracks status, duration,
result and error per step, and reports to the caller through a record sink:
progress records at fixed checkpoints, then exactly one final record.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Set, Tuple

from mgo_events.config import ScraperSettings, SUCCESSFUL_METHOD_NAME
from mgo_events.core.interfaces import (
    EventScraper,
    RecordSink,
    RecordSinkError,
    Renderer,
    RenderSession,
)
from mgo_events.core.models import (
    FinalRecord,
    PipelineStep,
    ProgressRecord,
    StepState,
    StepStatus,
    StreamRecord,
    count_events,
    freeze_events_by_date,
)
from mgo_events.utils import elapsed_ms, monotonic_ms

from .cancellation import CancellationToken
from .extractor_service import ExtractorService
from .fallback_service import FallbackService
from .normalizer_service import NormalizerService

logger = logging.getLogger("mgo_events.pipeline")

# Fixed checkpoints, not proportional to elapsed time
PROGRESS_STARTED = 10
PROGRESS_AFTER_STEP = {
    PipelineStep.ACQUIRE_RENDERER: 25,
    PipelineStep.LOAD_AND_WAIT: 50,
    PipelineStep.EXTRACT: 75,
    PipelineStep.NORMALIZE: 90,
    PipelineStep.FINALIZE: 100,
}
PROGRESS_DONE = 100


class StepTracker:
    """
    Tracks the status of every pipeline step.

    Each transition replaces the step's StepStatus with a new frozen value, so
    a snapshot handed to the caller never changes afterwards.
    """

    def __init__(self, steps: Iterable[PipelineStep] = PipelineStep.ordered()):
        self._order: Tuple[PipelineStep, ...] = tuple(steps)
        self._statuses: Dict[PipelineStep, StepStatus] = {
            step: StepStatus(name=step.value) for step in self._order
        }
        self._started_at: Dict[PipelineStep, int] = {}

    def snapshot(self) -> Tuple[StepStatus, ...]:
        return tuple(self._statuses[step] for step in self._order)

    def status(self, step: PipelineStep) -> StepStatus:
        return self._statuses[step]

    @property
    def running(self) -> Optional[PipelineStep]:
        for step in self._order:
            if self._statuses[step].state is StepState.RUNNING:
                return step
        return None

    def start(self, step: PipelineStep):
        """
        Mark a step running.

        Raises:
            RuntimeError: If the step is not pending or an earlier step has
                not succeeded
        """
        if self._statuses[step].state is not StepState.PENDING:
            raise RuntimeError(f"Step '{step.value}' is not pending")
        for earlier in self._order[:self._order.index(step)]:
            if self._statuses[earlier].state is not StepState.SUCCESS:
                raise RuntimeError(f"Step '{step.value}' started before '{earlier.value}' succeeded")

        self._started_at[step] = monotonic_ms()
        self._statuses[step] = self._statuses[step].start()
        logger.info(f"Step '{step.value}' running")

    def succeed(self, step: PipelineStep, result: Optional[Dict[str, Any]] = None):
        if self._statuses[step].state is not StepState.RUNNING:
            raise RuntimeError(f"Step '{step.value}' is not running")
        duration = elapsed_ms(self._started_at[step])
        self._statuses[step] = self._statuses[step].succeed(result, duration)
        logger.info(f"Step '{step.value}' succeeded in {duration}ms: {result}")

    def fail_running(self, error: str) -> Optional[PipelineStep]:
        """Mark the running step failed; later steps stay pending."""
        step = self.running
        if step is None:
            return None
        duration = elapsed_ms(self._started_at[step])
        self._statuses[step] = self._statuses[step].fail(error, duration)
        logger.error(f"Step '{step.value}' failed after {duration}ms: {error}")
        return step


def error_message(error: BaseException) -> str:
    return str(error) or type(error).__name__


@dataclass(eq=False)
class PipelineRun:
    """State owned by a single run: its steps, its token and its render session."""
    token: CancellationToken
    tracker: StepTracker = field(default_factory=StepTracker)
    session: Optional[RenderSession] = None


class ScrapePipeline(EventScraper):
    """
    The scrape pipeline: acquire renderer, load+wait, extract, normalize, finalize.

    Every run launches and owns its render session, which is closed on every
    exit path including task cancellation. Runs share the token passed in, if
    any; otherwise each run gets a fresh one, so a cancelled run never leaks
    into the next.
    """

    def __init__(
        self,
        renderer: Renderer,
        settings: Optional[ScraperSettings] = None,
        extractor: Optional[ExtractorService] = None,
        normalizer: Optional[NormalizerService] = None,
        fallback: Optional[FallbackService] = None,
        token: Optional[CancellationToken] = None,
    ):
        self.renderer = renderer
        self.settings = settings or ScraperSettings()
        self.extractor = extractor or ExtractorService(
            self.settings.event_box_selector,
            self.settings.event_name_prefix,
        )
        self.normalizer = normalizer or NormalizerService(self.settings.source_origin)
        self.fallback = fallback or FallbackService()
        self.token = token
        self._active: Set[PipelineRun] = set()

    def cancel(self, reason: str = "Pipeline cancelled"):
        """Cancel every run currently in progress."""
        for run in list(self._active):
            run.token.cancel(reason)

    async def run(self, emit: RecordSink) -> FinalRecord:
        run = PipelineRun(token=self.token or CancellationToken())
        self._active.add(run)
        try:
            return await self._execute(run, emit)
        finally:
            self._active.discard(run)

    async def _execute(self, run: PipelineRun, emit: RecordSink) -> FinalRecord:
        tracker = run.tracker
        logger.info(f"Starting scrape of {self.settings.target_url}")

        try:
            events = await self._run_steps(run, emit)
        except (asyncio.CancelledError, RecordSinkError):
            await self._release_session(run)
            raise
        except Exception as e:
            message = error_message(e)
            failed_step = tracker.fail_running(message)
            await self._release_session(run)
            await self._broadcast(emit, ProgressRecord(PROGRESS_DONE, tracker.snapshot()))

            if failed_step is PipelineStep.ACQUIRE_RENDERER and self.fallback.is_eligible(e):
                logger.warning(f"Renderer unavailable, reporting sample data: {message}")
                final = self.fallback.build_outcome()
            else:
                final = FinalRecord(success=False, error=message)

            await self._broadcast(emit, final)
            return final

        await self._release_session(run)
        final = FinalRecord(
            success=True,
            events=events,
            successful_method_name=SUCCESSFUL_METHOD_NAME,
        )
        await self._broadcast(emit, final)
        total_events, total_dates = count_events(events)
        logger.info(f"Scrape complete: {total_events} events across {total_dates} dates")
        return final

    async def _run_steps(self, run: PipelineRun, emit: RecordSink):
        settings = self.settings
        tracker = run.tracker
        guard = run.token.guard

        # Step 1: acquire renderer
        self._begin(run, PipelineStep.ACQUIRE_RENDERER)
        await self._broadcast(emit, ProgressRecord(PROGRESS_STARTED, tracker.snapshot()))
        run.session = await self.renderer.launch()
        run.token.raise_if_cancelled()
        await self._complete(tracker, emit, PipelineStep.ACQUIRE_RENDERER, {'browserLaunched': True})

        # Step 2: load and wait for the schedule to render
        self._begin(run, PipelineStep.LOAD_AND_WAIT)
        page = await guard(run.session.open_page(
            settings.target_url,
            wait_condition=settings.wait_condition,
            timeout_ms=settings.navigation_timeout_ms,
        ))
        await guard(page.wait_for_selector(settings.event_box_selector, timeout_ms=settings.selector_timeout_ms))
        await guard(page.wait_fixed(settings.settle_delay_ms))
        await self._complete(tracker, emit, PipelineStep.LOAD_AND_WAIT, {'pageLoaded': True})

        # Step 3: extract raw fragments
        self._begin(run, PipelineStep.EXTRACT)
        fragments = list(await guard(self.extractor.extract(page)))
        await self._complete(tracker, emit, PipelineStep.EXTRACT, {'eventsFound': len(fragments)})

        # Step 4: normalize
        self._begin(run, PipelineStep.NORMALIZE)
        grouped = self.normalizer.normalize(fragments)
        total_events, total_dates = count_events(grouped)
        await self._complete(tracker, emit, PipelineStep.NORMALIZE, {
            'totalEvents': total_events,
            'totalDates': total_dates,
        })

        # Step 5: finalize
        self._begin(run, PipelineStep.FINALIZE)
        events = freeze_events_by_date(grouped)
        await self._complete(tracker, emit, PipelineStep.FINALIZE, {'formatted': True})

        return events

    def _begin(self, run: PipelineRun, step: PipelineStep):
        # Cancellation is checked between steps and fails the step being entered
        run.tracker.start(step)
        run.token.raise_if_cancelled()

    async def _complete(self, tracker: StepTracker, emit: RecordSink, step: PipelineStep, result: dict):
        tracker.succeed(step, result)
        await self._broadcast(emit, ProgressRecord(PROGRESS_AFTER_STEP[step], tracker.snapshot()))

    async def _broadcast(self, emit: RecordSink, record: StreamRecord):
        try:
            await emit(record)
        except Exception as e:
            raise RecordSinkError(f"Failed to deliver {record.type} record: {e}") from e

    async def _release_session(self, run: PipelineRun):
        session, run.session = run.session, None
        if session is None:
            return
        try:
            await session.close()
            logger.info("Render session closed")
        except Exception as e:
            # Never replaces the error that got us here
            logger.error(f"Error closing render session: {e}", exc_info=True)
