from __future__ import annotations

import math
from dataclasses import dataclass

from spelling_session.models.plans import LearningPlan, PlanDetails

DEFAULT_DAILY_NEW = 20


@dataclass(frozen=True)
class DueCounts:
    new: int
    review: int

    @property
    def empty(self) -> bool:
        return self.new == 0 and self.review == 0


def plan_due_new(plan: PlanDetails, *, total_words: int, remaining_new: int) -> int:
    remaining_new = max(0, remaining_new)
    if plan.type == "customWords" and plan.value > 0:
        return min(plan.value, remaining_new)
    if plan.type in {"preset", "customDays"} and plan.value > 0:
        daily_quota = math.ceil(total_words / plan.value)
        return min(daily_quota, remaining_new)
    return min(DEFAULT_DAILY_NEW, remaining_new)


def compute_due_counts(learning_plan: LearningPlan, action: str | PlanDetails) -> DueCounts:
    progress = learning_plan.progress

    if action == "activate":
        due_new = max(0, progress.due_new_count - progress.learned_today_count)
        due_review = progress.due_review_count
    elif action == "reset" or isinstance(action, PlanDetails):
        due_new = plan_due_new(
            action if isinstance(action, PlanDetails) else learning_plan.plan,
            total_words=learning_plan.total_words,
            remaining_new=progress.remaining_new_words,
        )
        due_review = 0 if action == "reset" else progress.due_review_count
    else:
        raise ValueError(f"unsupported learning action: {action!r}")

    if learning_plan.plan.review_strategy == "NONE":
        due_review = 0
    return DueCounts(new=max(0, due_new), review=max(0, due_review))
