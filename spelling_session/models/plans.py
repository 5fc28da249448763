from __future__ import annotations

from dataclasses import dataclass, field

PLAN_TYPES = {"preset", "customDays", "customWords"}
REVIEW_STRATEGIES = {"NONE", "EBBINGHAUS", "SM2", "LEITNER"}
LEARNING_ORDERS = {"SEQUENTIAL", "RANDOM"}


@dataclass(frozen=True)
class PlanDetails:
    type: str
    value: int
    review_strategy: str = "EBBINGHAUS"
    learning_order: str = "SEQUENTIAL"


@dataclass(frozen=True)
class PlanProgress:
    total_words: int = 0
    learned_count: int = 0
    mastered_count: int = 0
    due_new_count: int = 0
    due_review_count: int = 0
    learned_today_count: int = 0
    reviewed_today_count: int = 0
    current_chapter: int = 0
    total_chapters: int = 0

    @property
    def remaining_new_words(self) -> int:
        return max(0, self.total_words - self.learned_count)


@dataclass(frozen=True)
class LearningPlan:
    plan_id: int
    list_code: str
    total_words: int
    plan: PlanDetails
    progress: PlanProgress = field(default_factory=PlanProgress)
    is_current: bool = False


def plan_details_from_payload(payload: dict) -> PlanDetails:
    plan_type = str(payload.get("type") or payload.get("planType") or "")
    value = int(payload.get("value", payload.get("planValue", 0)) or 0)
    strategy = str(payload.get("reviewStrategy") or "EBBINGHAUS").upper()
    order = str(payload.get("learningOrder") or "SEQUENTIAL").upper()
    return PlanDetails(
        type=plan_type,
        value=value,
        review_strategy=strategy if strategy in REVIEW_STRATEGIES else "EBBINGHAUS",
        learning_order=order if order in LEARNING_ORDERS else "SEQUENTIAL",
    )


def learning_plan_from_payload(payload: dict) -> LearningPlan:
    book = payload.get("book") or {}
    progress = payload.get("progress") or {}
    total_words = int(book.get("totalWords") or progress.get("totalWords") or 0)
    return LearningPlan(
        plan_id=int(payload["planId"]),
        list_code=str(payload.get("listCode") or book.get("listCode") or ""),
        total_words=total_words,
        plan=plan_details_from_payload(payload.get("plan") or {}),
        progress=PlanProgress(
            total_words=total_words,
            learned_count=int(progress.get("learnedCount") or 0),
            mastered_count=int(progress.get("masteredCount") or 0),
            due_new_count=int(progress.get("dueNewCount") or 0),
            due_review_count=int(progress.get("dueReviewCount") or 0),
            learned_today_count=int(progress.get("learnedTodayCount") or 0),
            reviewed_today_count=int(progress.get("reviewedTodayCount") or 0),
            current_chapter=int(progress.get("currentChapter") or 0),
            total_chapters=int(progress.get("totalChapters") or 0),
        ),
        is_current=bool(payload.get("isCurrent", False)),
    )
