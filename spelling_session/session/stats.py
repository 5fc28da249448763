from __future__ import annotations

import math
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class SessionStats:
    time: str
    input_count: int
    correct_count: int
    accuracy: float
    remaining: int
    mastered_count: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


def accuracy(success: int, failure: int) -> float:
    attempts = success + failure
    if attempts == 0:
        return 0.0
    # rounds half up
    return math.floor(success / attempts * 1000 + 0.5) / 10


def format_elapsed(seconds: int) -> str:
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def build_stats(
    *,
    elapsed_seconds: int,
    success: int,
    failure: int,
    remaining: int,
    mastered_count: int = 0,
) -> SessionStats:
    return SessionStats(
        time=format_elapsed(elapsed_seconds),
        input_count=success + failure,
        correct_count=success,
        accuracy=accuracy(success, failure),
        remaining=remaining,
        mastered_count=mastered_count,
    )
