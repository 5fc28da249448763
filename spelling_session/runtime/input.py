from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol


@dataclass(frozen=True)
class KeyEvent:
    key: str
    ctrl: bool = False
    meta: bool = False
    alt: bool = False

    @property
    def has_modifier(self) -> bool:
        return self.ctrl or self.meta or self.alt


KeyHandler = Callable[[KeyEvent], None]


class InputSource(Protocol):
    def subscribe(self, handler: KeyHandler) -> Callable[[], None]: ...


class KeyEventHub:
    """In-process input source: whatever is published reaches every subscriber."""

    def __init__(self) -> None:
        self._handlers: list[KeyHandler] = []

    def subscribe(self, handler: KeyHandler) -> Callable[[], None]:
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def publish(self, event: KeyEvent) -> None:
        for handler in list(self._handlers):
            handler(event)

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)
