from __future__ import annotations

from dataclasses import asdict
from typing import Callable

from spelling_session.api.schemas import PreferencesUpdateRequest
from spelling_session.config import SessionTimings
from spelling_session.runtime.input import KeyEvent, KeyEventHub
from spelling_session.runtime.kv import KeyValueStore, SqliteKeyValueStore
from spelling_session.runtime.scheduling import AsyncioScheduler, Scheduler
from spelling_session.services.audio import AudioEventQueue
from spelling_session.services.backend import BackendClient
from spelling_session.services.notices import NoticeBoard
from spelling_session.services.progress import ProgressReporter
from spelling_session.session.controller import SessionController
from spelling_session.settings.store import SettingsStore
from spelling_session.spelling.machine import InputStateMachine


class PracticeHost:
    """Wires settings, session, input machine and collaborators for one user."""

    def __init__(
        self,
        *,
        settings: SettingsStore,
        controller: SessionController,
        machine: InputStateMachine,
        keys: KeyEventHub,
        notices: NoticeBoard,
        audio: AudioEventQueue,
    ) -> None:
        self.settings = settings
        self.controller = controller
        self.machine = machine
        self.keys = keys
        self.notices = notices
        self.audio = audio
        self._unmount = machine.mount(keys)

    @classmethod
    def create(
        cls,
        *,
        storage: KeyValueStore | None = None,
        backend: BackendClient | None = None,
        scheduler: Scheduler | None = None,
        timings: SessionTimings | None = None,
        clock: Callable[[], float] | None = None,
    ) -> "PracticeHost":
        backend = backend or BackendClient()
        scheduler = scheduler or AsyncioScheduler()
        timings = timings or SessionTimings()
        notices = NoticeBoard()
        audio = AudioEventQueue()
        settings = SettingsStore(storage or SqliteKeyValueStore())
        reporter = ProgressReporter(backend, notices)
        controller_kwargs = {"clock": clock} if clock is not None else {}
        controller = SessionController(
            provider=backend,
            plans=backend,
            advancer=backend,
            reporter=reporter,
            scheduler=scheduler,
            notifier=notices,
            timings=timings,
            **controller_kwargs,
        )
        machine = InputStateMachine(controller, settings, scheduler, audio, audio, timings)
        return cls(
            settings=settings,
            controller=controller,
            machine=machine,
            keys=KeyEventHub(),
            notices=notices,
            audio=audio,
        )

    def press(self, key: str, *, ctrl: bool = False, meta: bool = False, alt: bool = False) -> None:
        self.keys.publish(KeyEvent(key=key, ctrl=ctrl, meta=meta, alt=alt))

    def update_preferences(self, request: PreferencesUpdateRequest) -> dict:
        if request.speech is not None:
            changes = request.speech.model_dump(exclude_none=True)
            if changes:
                self.settings.set_speech_config(**changes)
        if request.is_custom_speech is not None:
            self.settings.set_is_custom_speech(request.is_custom_speech)
        if request.hide_word_in_sentence is not None:
            self.settings.set_hide_word_in_sentence(request.hide_word_in_sentence)
        if request.display_mode is not None:
            self.settings.set_display_mode(request.display_mode)
        if request.show_sentences is not None:
            self.settings.set_show_sentences(request.show_sentences)
        if request.show_sentence_translation is not None:
            self.settings.set_show_sentence_translation(request.show_sentence_translation)
        return self.settings.snapshot()

    def state(self) -> dict:
        snapshot = self.controller.snapshot()
        progress = self.machine.progress
        word = snapshot.current_word
        return {
            "phase": snapshot.phase,
            "current_index": snapshot.current_index,
            "queue_length": snapshot.queue_length,
            "round": snapshot.round,
            "failed_count": snapshot.failed_count,
            "error": snapshot.error,
            "stats": snapshot.stats.to_dict(),
            "word": _word_view(word) if word is not None else None,
            "input": None
            if progress is None
            else {
                "position": progress.position,
                "error": progress.error,
                "complete": progress.complete,
                "chars": [asdict(view) for view in self.machine.render()],
            },
            "sentences": self.machine.example_sentences(),
        }

    def events(self) -> dict:
        return {
            "notices": [asdict(item) for item in self.notices.drain()],
            "audio": self.audio.drain(),
        }

    def close(self) -> None:
        self._unmount()
        self.machine.close()


def _word_view(word) -> dict:
    pron = word.pronunciation
    return {
        "progress_id": word.progress_id,
        "text": word.text,
        "pronunciation": {
            "uk": pron.uk.phonetic if pron.uk else None,
            "us": pron.us.phonetic if pron.us else None,
        },
        "definitions": [{"pos": item.pos, "meaning": item.meaning} for item in word.definitions],
    }
