from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Protocol

from spelling_session.config import SessionTimings
from spelling_session.models.words import Word
from spelling_session.runtime.input import InputSource, KeyEvent
from spelling_session.runtime.scheduling import CancelHandle, Scheduler
from spelling_session.services.audio import CuePlayer, Speaker
from spelling_session.services.progress import QUALITY_FAILURE, QUALITY_SUCCESS
from spelling_session.settings.store import SettingsStore
from spelling_session.spelling.masking import hidden_indices, is_input_char, is_skippable_char, mask_sentence

logger = logging.getLogger(__name__)

UNTOUCHED = "untouched"
CURRENT = "current"
CORRECT = "correct"
INCORRECT = "incorrect"
SKIPPED = "skipped"


class SessionHooks(Protocol):
    """What the input machine needs from the session that owns the queue."""

    @property
    def is_active(self) -> bool: ...

    def mark_mistake(self) -> None: ...

    def record_failure(self) -> None: ...

    def record_success(self) -> None: ...

    def report_outcome(self, progress_id: int, quality: int) -> None: ...

    def next(self) -> None: ...

    def subscribe(self, listener: Callable) -> Callable[[], None]: ...


@dataclass
class InputProgress:
    word: Word
    visit: int
    position: int = 0
    entered: dict[int, str] = field(default_factory=dict)
    error: bool = False
    complete: bool = False


@dataclass(frozen=True)
class CharView:
    index: int
    char: str
    state: str
    display: str


def next_input_position(text: str, start: int) -> int:
    for idx in range(start, len(text)):
        if is_input_char(text[idx]):
            return idx
    return len(text)


class InputStateMachine:
    def __init__(
        self,
        session: SessionHooks,
        settings: SettingsStore,
        scheduler: Scheduler,
        speaker: Speaker,
        cues: CuePlayer,
        timings: SessionTimings | None = None,
    ) -> None:
        self.session = session
        self.settings = settings
        self.scheduler = scheduler
        self.speaker = speaker
        self.cues = cues
        self.timings = timings or SessionTimings()
        self.progress: InputProgress | None = None
        self.peeking = False
        self._timers: list[CancelHandle] = []
        self._unsubscribe_session = session.subscribe(self._on_session_change)

    def mount(self, source: InputSource) -> Callable[[], None]:
        return source.subscribe(self.handle_key)

    def close(self) -> None:
        self._cancel_timers()
        self._unsubscribe_session()
        self.progress = None

    def load(self, word: Word, visit: int) -> None:
        self._cancel_timers()
        self.peeking = False
        self.progress = InputProgress(word=word, visit=visit, position=next_input_position(word.text, 0))
        self.speaker.speak(word.text, self.settings.speech_config)
        if self.progress.position == len(word.text):
            # nothing to type; move on without scoring
            logger.info("skipping %r: no input-required characters", word.text)
            self.progress.complete = True
            self._timers.append(self.scheduler.schedule_once(self._advance, self.timings.success_delay_ms))

    def handle_key(self, event: KeyEvent) -> bool:
        progress = self.progress
        if progress is None or progress.complete or progress.error:
            return False
        if not self.session.is_active or event.has_modifier or not _is_letter_key(event.key):
            return False

        text = progress.word.text
        if progress.position >= len(text):
            return False
        target = text[progress.position]
        progress.entered[progress.position] = event.key

        if event.key != target:
            self._fail(progress)
            return True

        position = next_input_position(text, progress.position + 1)
        for idx in range(progress.position + 1, position):
            progress.entered[idx] = text[idx]
        progress.position = position
        if position == len(text):
            self._succeed(progress)
        return True

    def _fail(self, progress: InputProgress) -> None:
        progress.error = True
        logger.debug("mismatch on %r at %s", progress.word.text, progress.position)
        self.session.mark_mistake()
        self.session.record_failure()
        self.session.report_outcome(progress.word.progress_id, QUALITY_FAILURE)
        self.cues.play_cue("failure")
        self._timers.append(
            self.scheduler.schedule_once(lambda: self._end_cooldown(progress), self.timings.error_cooldown_ms)
        )

    def _end_cooldown(self, progress: InputProgress) -> None:
        if progress is not self.progress:
            return
        progress.entered.clear()
        progress.error = False
        progress.position = next_input_position(progress.word.text, 0)
        self.speaker.speak(progress.word.text, self.settings.speech_config)

    def _succeed(self, progress: InputProgress) -> None:
        progress.complete = True
        self.cues.play_cue("success")
        self.session.report_outcome(progress.word.progress_id, QUALITY_SUCCESS)
        self.session.record_success()
        self._timers.append(self.scheduler.schedule_once(self._advance, self.timings.success_delay_ms))

    def _advance(self) -> None:
        if self.progress is not None and self.progress.complete:
            self.session.next()

    def render(self) -> list[CharView]:
        progress = self.progress
        if progress is None:
            return []
        text = progress.word.text
        hidden = hidden_indices(text, self.settings.display_mode)
        views: list[CharView] = []
        for idx, char in enumerate(text):
            entered = idx < progress.position
            if is_skippable_char(char):
                views.append(CharView(idx, char, SKIPPED if entered else UNTOUCHED, char))
                continue
            if entered:
                state = CORRECT if progress.entered.get(idx) == char else INCORRECT
            elif idx == progress.position:
                state = INCORRECT if progress.error else CURRENT
            else:
                state = UNTOUCHED
            display = "_" if idx in hidden and not entered and not self.peeking else char
            views.append(CharView(idx, char, state, display))
        return views

    def example_sentences(self) -> list[dict]:
        if self.progress is None or not self.settings.show_sentences:
            return []
        word = self.progress.word
        out = []
        for example in word.examples:
            en = mask_sentence(example.en, word.text) if self.settings.hide_word_in_sentence else example.en
            out.append(
                {
                    "en": en,
                    "cn": example.cn if self.settings.show_sentence_translation else None,
                    "speech_url": example.speech_url,
                }
            )
        return out

    def play_pronunciation(self, kind: str | None = None) -> bool:
        if self.progress is None:
            return False
        word = self.progress.word
        uk, us = word.pronunciation.uk, word.pronunciation.us
        if kind == "uk" and uk and uk.phonetic:
            accent = "en-GB"
        elif kind == "us" and us and us.phonetic:
            accent = "en-US"
        elif us and us.phonetic:
            accent = "en-US"
        elif uk and uk.phonetic:
            accent = "en-GB"
        else:
            logger.info("no pronunciation detail for %r (%s)", word.text, kind or "auto")
            return False
        self.speaker.speak(word.text, self.settings.speech_config, accent=accent)
        return True

    def _on_session_change(self, snapshot) -> None:
        word = snapshot.current_word
        if word is None:
            self._cancel_timers()
            self.progress = None
            return
        if not snapshot.is_active:
            return
        if self.progress is None or self.progress.visit != snapshot.visit:
            self.load(word, snapshot.visit)

    def _cancel_timers(self) -> None:
        for handle in self._timers:
            handle.cancel()
        self._timers.clear()


def _is_letter_key(key: str) -> bool:
    return len(key) == 1 and is_input_char(key)
