from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from spelling_session.settings.store import SpeechConfig

VOICE_PRESETS = {
    "en-GB": {
        "female": "en-GB-SoniaNeural",
        "male": "en-GB-RyanNeural",
    },
    "en-US": {
        "female": "en-US-JennyNeural",
        "male": "en-US-GuyNeural",
    },
}


def resolve_voice(accent: str, gender: str) -> str:
    presets = VOICE_PRESETS.get(accent) or VOICE_PRESETS["en-GB"]
    if gender in presets:
        return presets[gender]
    return presets["female"]


class Speaker(Protocol):
    def speak(self, text: str, config: SpeechConfig, *, accent: str | None = None) -> None: ...


class CuePlayer(Protocol):
    def play_cue(self, name: str) -> None: ...


class AudioEventQueue:
    """Collects speech and cue requests for the host to play back."""

    def __init__(self, limit: int = 50) -> None:
        self._events: deque[dict] = deque(maxlen=limit)

    def speak(self, text: str, config: SpeechConfig, *, accent: str | None = None) -> None:
        if not text.strip():
            return
        final_accent = accent or config.accent
        self._events.append(
            {
                "type": "speech",
                "text": text,
                "accent": final_accent,
                "voice": resolve_voice(final_accent, config.gender),
                "rate": config.rate,
                "volume": config.volume,
                "pitch": config.pitch,
            }
        )

    def play_cue(self, name: str) -> None:
        self._events.append({"type": "cue", "name": name})

    def drain(self) -> list[dict]:
        events = list(self._events)
        self._events.clear()
        return events
