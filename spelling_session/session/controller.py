from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol

from spelling_session.config import SessionTimings
from spelling_session.errors import LoadFailure, SyncFailure
from spelling_session.models.plans import LearningPlan, PlanDetails
from spelling_session.models.words import Word
from spelling_session.runtime.scheduling import CancelHandle, Scheduler
from spelling_session.services.notices import Notifier
from spelling_session.services.progress import ProgressReporter
from spelling_session.session.quota import DueCounts, compute_due_counts
from spelling_session.session.stats import SessionStats, build_stats

logger = logging.getLogger(__name__)

IDLE = "IDLE"
LOADING = "LOADING"
ACTIVE = "ACTIVE"
ROUND_COMPLETE = "ROUND_COMPLETE"
SESSION_COMPLETE = "SESSION_COMPLETE"
ABORTED = "ABORTED"

LEARNING_ACTIONS = {"activate", "reset"}


class WordProvider(Protocol):
    async def fetch_words(self, list_code: str, due_new: int, due_review: int) -> list[Word]: ...

    async def fetch_mistake_words(self, plan_id: int) -> list[Word]: ...


class PlanSource(Protocol):
    async def fetch_learning_list(self) -> list[LearningPlan]: ...


class PlanAdvance(Protocol):
    async def advance(self, plan_id: int) -> None: ...


@dataclass(frozen=True)
class LearningTrigger:
    list_code: str
    action: str | PlanDetails | None


@dataclass(frozen=True)
class MistakeReviewTrigger:
    words: tuple[Word, ...]


@dataclass(frozen=True)
class SessionSnapshot:
    phase: str
    current_index: int
    queue_length: int
    current_word: Word | None
    visit: int
    round: int
    failed_count: int
    stats: SessionStats
    error: str | None = None

    @property
    def is_active(self) -> bool:
        return self.phase == ACTIVE


SessionListener = Callable[[SessionSnapshot], None]


class SessionController:
    """Owns one practice session: the word queue, its rounds, timer and stats.

    Lifecycle: IDLE -> LOADING -> ACTIVE -> ROUND_COMPLETE -> SESSION_COMPLETE,
    with ABORTED when a load fails. Every cursor move bumps ``visit`` so that
    listeners can tell two visits of the same word apart.
    """

    def __init__(
        self,
        *,
        provider: WordProvider,
        plans: PlanSource,
        advancer: PlanAdvance,
        reporter: ProgressReporter,
        scheduler: Scheduler,
        notifier: Notifier,
        timings: SessionTimings | None = None,
        clock: Callable[[], float] = time.monotonic,
        on_refresh: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        self.provider = provider
        self.plans = plans
        self.advancer = advancer
        self.reporter = reporter
        self.scheduler = scheduler
        self.notifier = notifier
        self.timings = timings or SessionTimings()
        self.clock = clock
        self.on_refresh = on_refresh

        self.phase = IDLE
        self.plan: LearningPlan | None = None
        self.last_error: str | None = None
        self._queue: list[Word] = []
        self._index = 0
        self._failed: list[Word] = []
        self._mistake_pending = False
        self._success = 0
        self._failure = 0
        self._visit = 0
        self._round = 0
        self._started_at: float | None = None
        self._elapsed = 0
        self._tick: CancelHandle | None = None
        self._suspended = False
        self._generation = 0
        self._listeners: list[SessionListener] = []

    # -- observation -------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.phase == ACTIVE

    @property
    def queue(self) -> list[Word]:
        return list(self._queue)

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_word(self) -> Word | None:
        if 0 <= self._index < len(self._queue):
            return self._queue[self._index]
        return None

    @property
    def failed_words(self) -> list[Word]:
        return list(self._failed)

    @property
    def stats(self) -> SessionStats:
        if self.phase == SESSION_COMPLETE or not self._queue:
            remaining = 0
        else:
            remaining = len(self._queue) - self._index
        return build_stats(
            elapsed_seconds=self._elapsed,
            success=self._success,
            failure=self._failure,
            remaining=remaining,
            mastered_count=self.plan.progress.mastered_count if self.plan else 0,
        )

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            phase=self.phase,
            current_index=self._index,
            queue_length=len(self._queue),
            current_word=self.current_word,
            visit=self._visit,
            round=self._round,
            failed_count=len(self._failed),
            stats=self.stats,
            error=self.last_error,
        )

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    # -- triggers ----------------------------------------------------------

    async def handle_trigger(self, trigger: LearningTrigger | MistakeReviewTrigger) -> SessionSnapshot:
        if isinstance(trigger, MistakeReviewTrigger):
            if not trigger.words:
                return self.snapshot()
            self._generation += 1
            self._begin_or_finish(list(trigger.words))
            return self.snapshot()

        if trigger.action is None:
            return self.snapshot()
        if not trigger.list_code:
            raise ValueError("list_code is empty")
        if not isinstance(trigger.action, PlanDetails) and trigger.action not in LEARNING_ACTIONS:
            raise ValueError(f"unsupported learning action: {trigger.action!r}")

        generation = self._begin_loading()
        try:
            learning_list = await self.plans.fetch_learning_list()
        except Exception as exc:
            self._abort(generation, LoadFailure(f"Failed to load learning plans: {exc}"))
            return self.snapshot()
        if self._superseded(generation):
            return self.snapshot()

        plan = next((item for item in learning_list if item.list_code == trigger.list_code), None)
        if plan is None:
            self._abort(generation, LoadFailure(f"No learning plan found for {trigger.list_code}."))
            return self.snapshot()
        self.plan = plan

        due = compute_due_counts(plan, trigger.action)
        logger.info("due counts for %s: new=%s review=%s", trigger.list_code, due.new, due.review)
        if due.empty:
            self._finish_empty()
            return self.snapshot()

        await self._load_words(generation, trigger.list_code, due)
        return self.snapshot()

    async def review_mistakes(self, plan_id: int) -> SessionSnapshot:
        generation = self._begin_loading()
        try:
            words = await self.provider.fetch_mistake_words(plan_id)
        except Exception as exc:
            self._abort(generation, LoadFailure(f"Failed to load mistake words: {exc}"))
            return self.snapshot()
        if not self._superseded(generation):
            self._begin_or_finish(words)
        return self.snapshot()

    async def _load_words(self, generation: int, list_code: str, due: DueCounts) -> None:
        try:
            words = await self.provider.fetch_words(list_code, due.new, due.review)
        except Exception as exc:
            self._abort(generation, LoadFailure(f"Failed to load today's words: {exc}"))
            return
        if self._superseded(generation):
            logger.info("dropping superseded word batch for %s", list_code)
            return
        self._begin_or_finish(words)

    def _begin_loading(self) -> int:
        self._generation += 1
        self._stop_tick()
        self.phase = LOADING
        self.last_error = None
        self._emit()
        return self._generation

    def _superseded(self, generation: int) -> bool:
        return generation != self._generation

    def _abort(self, generation: int, failure: LoadFailure) -> None:
        if self._superseded(generation):
            logger.info("ignoring failure of superseded load: %s", failure)
            return
        logger.error("session load failed: %s", failure)
        self._reset_state()
        self.plan = None
        self.phase = ABORTED
        self.last_error = str(failure)
        self.notifier.notify(str(failure), level="error")
        self._emit()

    def _begin_or_finish(self, words: list[Word]) -> None:
        if not words:
            self._finish_empty()
            return
        self._reset_state()
        self._queue = list(words)
        self.last_error = None
        self._round = 1
        self._visit += 1
        logger.info("session started with %s words", len(self._queue))
        self._enter_active()

    def _finish_empty(self) -> None:
        self._reset_state()
        self.phase = SESSION_COMPLETE
        self.notifier.notify("Nothing due today!")
        self._emit()

    def _reset_state(self) -> None:
        self._stop_tick()
        self._queue = []
        self._index = 0
        self._failed = []
        self._mistake_pending = False
        self._success = 0
        self._failure = 0
        self._round = 0
        self._started_at = None
        self._elapsed = 0

    # -- navigation --------------------------------------------------------

    def next(self) -> None:
        if self.phase != ACTIVE:
            return
        self._flush_mistake()
        if self._index < len(self._queue) - 1:
            self._index += 1
            self._visit += 1
            self._emit()
            return

        self._leave_active(ROUND_COMPLETE)
        self._emit()
        if self._failed:
            logger.info("requeueing %s missed words", len(self._failed))
            self._queue.extend(self._failed)
            self._failed = []
            self._index += 1
            self._visit += 1
            self._round += 1
            self.notifier.notify("Reviewing mistakes from this round...")
            self._enter_active()
        else:
            self.phase = SESSION_COMPLETE
            self.notifier.notify("Session complete!", level="success")
            self._emit()

    def prev(self) -> None:
        if self.phase != ACTIVE:
            return
        self._flush_mistake()
        target = max(self._index - 1, 0)
        if target != self._index:
            self._index = target
            self._visit += 1
        self._emit()

    def mark_mistake(self) -> None:
        if self.phase == ACTIVE:
            self._mistake_pending = True

    def _flush_mistake(self) -> None:
        word = self.current_word
        if self._mistake_pending and word is not None:
            if all(item.progress_id != word.progress_id for item in self._failed):
                logger.debug("adding %r to this round's mistakes", word.text)
                self._failed.append(word)
        self._mistake_pending = False

    # -- outcomes ----------------------------------------------------------

    def record_success(self) -> None:
        self._success += 1
        self._emit()

    def record_failure(self) -> None:
        self._failure += 1
        self._emit()

    def report_outcome(self, progress_id: int, quality: int) -> None:
        self.reporter.report(progress_id, quality)

    # -- timer -------------------------------------------------------------

    def _enter_active(self) -> None:
        self.phase = ACTIVE
        if self._started_at is None:
            self._started_at = self.clock()
        if not self._suspended:
            self._start_tick()
        self._emit()

    def _leave_active(self, phase: str) -> None:
        self._update_elapsed()
        self._stop_tick()
        self.phase = phase

    def _start_tick(self) -> None:
        self._stop_tick()
        self._tick = self.scheduler.schedule_every_interval(self._on_tick, self.timings.tick_ms)

    def _stop_tick(self) -> None:
        if self._tick is not None:
            self._tick.cancel()
            self._tick = None

    def _on_tick(self) -> None:
        if self.phase != ACTIVE or self._started_at is None:
            return
        self._update_elapsed()
        self._emit()

    def _update_elapsed(self) -> None:
        if self._started_at is not None:
            self._elapsed = int(self.clock() - self._started_at)

    def suspend(self) -> None:
        self._suspended = True
        self._stop_tick()

    def resume(self) -> None:
        self._suspended = False
        if self.phase == ACTIVE and self._started_at is not None and self._tick is None:
            self._start_tick()

    @property
    def ticking(self) -> bool:
        return self._tick is not None

    # -- plan and teardown -------------------------------------------------

    async def advance_plan(self) -> bool:
        if self.plan is None:
            self.notifier.notify("No current learning plan.", level="error")
            return False
        try:
            await self.advancer.advance(self.plan.plan_id)
        except Exception as exc:
            failure = SyncFailure(f"Failed to start the next chapter: {exc}")
            logger.warning("%s", failure)
            self.notifier.notify(str(failure), level="error")
            return False
        self.notifier.notify("New chapter started!", level="success")
        if self.on_refresh is not None:
            await self.on_refresh()
        return True

    def return_to_home(self) -> None:
        self._generation += 1
        self._reset_state()
        self.phase = IDLE
        self.last_error = None
        self._emit()
