from __future__ import annotations

from spelling_session.host import PracticeHost
from spelling_session.models.plans import LearningPlan, PlanDetails, PlanProgress
from spelling_session.models.words import ExampleSentence, Pronunciation, PronunciationDetail, Word


class ManualTimer:
    def __init__(self, due: int, seq: int, callback, interval: int | None) -> None:
        self.due = due
        self.seq = seq
        self.callback = callback
        self.interval = interval
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual-time scheduler; ``advance`` fires whatever falls due."""

    def __init__(self) -> None:
        self.now = 0
        self._seq = 0
        self._timers: list[ManualTimer] = []

    def clock(self) -> float:
        return self.now / 1000

    def _add(self, callback, ms: int, interval: int | None) -> ManualTimer:
        self._seq += 1
        timer = ManualTimer(self.now + ms, self._seq, callback, interval)
        self._timers.append(timer)
        return timer

    def schedule_every_interval(self, callback, ms: int) -> ManualTimer:
        return self._add(callback, ms, ms)

    def schedule_once(self, callback, ms: int) -> ManualTimer:
        return self._add(callback, ms, None)

    def advance(self, ms: int) -> None:
        target = self.now + ms
        while True:
            due = [t for t in self._timers if not t.cancelled and t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due, t.seq))
            self.now = timer.due
            if timer.interval is None:
                timer.cancelled = True
            else:
                timer.due += timer.interval
            timer.callback()
        self.now = target
        self._timers = [t for t in self._timers if not t.cancelled]

    @property
    def repeating(self) -> int:
        return sum(1 for t in self._timers if not t.cancelled and t.interval is not None)


class FakeBackend:
    def __init__(self) -> None:
        self.plans: list[LearningPlan] = []
        self.words: list[Word] = []
        self.mistake_words: list[Word] = []
        self.fetch_calls: list[tuple[str, int, int]] = []
        self.progress_calls: list[tuple[int, int]] = []
        self.advanced: list[int] = []
        self.fail_fetch = False
        self.fail_plans = False
        self.fail_progress = False
        self.fail_advance = False

    async def fetch_learning_list(self) -> list[LearningPlan]:
        if self.fail_plans:
            raise RuntimeError("plans unavailable")
        return list(self.plans)

    async def fetch_words(self, list_code: str, due_new: int, due_review: int) -> list[Word]:
        self.fetch_calls.append((list_code, due_new, due_review))
        if self.fail_fetch:
            raise RuntimeError("word service down")
        return list(self.words)

    async def fetch_mistake_words(self, plan_id: int) -> list[Word]:
        if self.fail_fetch:
            raise RuntimeError("word service down")
        return list(self.mistake_words)

    async def update_progress(self, progress_id: int, quality: int) -> None:
        self.progress_calls.append((progress_id, quality))
        if self.fail_progress:
            raise RuntimeError("sync rejected")

    async def advance(self, plan_id: int) -> None:
        if self.fail_advance:
            raise RuntimeError("advance rejected")
        self.advanced.append(plan_id)


def make_word(progress_id: int, text: str, *, examples: tuple[str, ...] = ()) -> Word:
    return Word(
        progress_id=progress_id,
        text=text,
        pronunciation=Pronunciation(
            uk=PronunciationDetail(phonetic=f"/{text}/"),
            us=PronunciationDetail(phonetic=f"/{text}/"),
        ),
        examples=tuple(ExampleSentence(en=item, cn="例句") for item in examples),
    )


def make_plan(
    *,
    list_code: str = "cet4_core",
    plan_type: str = "customWords",
    value: int = 10,
    review_strategy: str = "EBBINGHAUS",
    total_words: int = 100,
    learned_count: int = 0,
    due_new: int = 10,
    due_review: int = 5,
    learned_today: int = 0,
) -> LearningPlan:
    return LearningPlan(
        plan_id=7,
        list_code=list_code,
        total_words=total_words,
        plan=PlanDetails(type=plan_type, value=value, review_strategy=review_strategy),
        progress=PlanProgress(
            total_words=total_words,
            learned_count=learned_count,
            mastered_count=3,
            due_new_count=due_new,
            due_review_count=due_review,
            learned_today_count=learned_today,
        ),
        is_current=True,
    )


def type_word(host: PracticeHost, text: str) -> None:
    for char in text:
        if char != " ":
            host.press(char)
