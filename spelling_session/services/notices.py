from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

UTC = timezone.utc
logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, message: str, *, level: str = "info") -> None: ...


@dataclass(frozen=True)
class Notice:
    message: str
    level: str
    created_at: str


class NoticeBoard:
    """Transient host notifications; the host polls and clears them."""

    def __init__(self, limit: int = 20) -> None:
        self._items: deque[Notice] = deque(maxlen=limit)

    def notify(self, message: str, *, level: str = "info") -> None:
        log = logger.warning if level == "error" else logger.info
        log("notice [%s] %s", level, message)
        self._items.append(Notice(message=message, level=level, created_at=datetime.now(UTC).isoformat()))

    def drain(self) -> list[Notice]:
        items = list(self._items)
        self._items.clear()
        return items

    def __len__(self) -> int:
        return len(self._items)
