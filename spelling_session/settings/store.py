from __future__ import annotations

import json
import logging
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError

from spelling_session.config import SETTINGS_NAMESPACE
from spelling_session.runtime.kv import KeyValueStore

logger = logging.getLogger(__name__)

DISPLAY_MODES = ("full", "hideVowels", "hideConsonants", "hideRandom", "hideAll")
MIN_RATE = 0.5
MAX_RATE = 1.5

KEY_SPEECH_CONFIG = SETTINGS_NAMESPACE + "speechConfig"
KEY_IS_CUSTOM_SPEECH = SETTINGS_NAMESPACE + "isCustomSpeech"
KEY_DISPLAY_MODE = SETTINGS_NAMESPACE + "displayMode"
KEY_HIDE_WORD_IN_SENTENCE = SETTINGS_NAMESPACE + "hideWordInSentence"
KEY_SHOW_SENTENCES = SETTINGS_NAMESPACE + "showSentences"
KEY_SHOW_SENTENCE_TRANSLATION = SETTINGS_NAMESPACE + "showSentenceTranslation"


class SpeechConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    lang: str = "en-GB"
    accent: Literal["en-GB", "en-US"] = "en-GB"
    rate: float = 0.8
    volume: float = 1.0
    pitch: float = 1.0
    gender: Literal["auto", "male", "female"] = "auto"


DEFAULT_SPEECH_CONFIG = SpeechConfig()


class SettingsStore:
    """Session preferences, loaded once and written back key by key.

    Reads never raise: a missing or corrupt entry falls back to its default.
    Writes are best effort; a failing store is logged and the in-memory value
    still changes.
    """

    def __init__(self, storage: KeyValueStore) -> None:
        self.storage = storage
        self._speech_config = self._load_speech_config()
        self._is_custom_speech = self._load_bool(KEY_IS_CUSTOM_SPEECH, False)
        self._display_mode = self._load_display_mode()
        self._hide_word_in_sentence = self._load_bool(KEY_HIDE_WORD_IN_SENTENCE, True)
        self._show_sentences = self._load_bool(KEY_SHOW_SENTENCES, False)
        self._show_sentence_translation = self._load_bool(KEY_SHOW_SENTENCE_TRANSLATION, True)

    @property
    def speech_config(self) -> SpeechConfig:
        return self._speech_config

    @property
    def is_custom_speech(self) -> bool:
        return self._is_custom_speech

    @property
    def display_mode(self) -> str:
        return self._display_mode

    @property
    def hide_word_in_sentence(self) -> bool:
        return self._hide_word_in_sentence

    @property
    def show_sentences(self) -> bool:
        return self._show_sentences

    @property
    def show_sentence_translation(self) -> bool:
        return self._show_sentence_translation

    def set_speech_config(self, **changes: Any) -> SpeechConfig:
        merged = {**self._speech_config.model_dump(), **changes}
        if "accent" in changes and "lang" not in changes:
            merged["lang"] = changes["accent"]
        merged["rate"] = _clamp_rate(merged.get("rate"))
        self._speech_config = SpeechConfig.model_validate(merged)
        self._save(KEY_SPEECH_CONFIG, self._speech_config.model_dump())
        return self._speech_config

    def set_is_custom_speech(self, value: bool) -> None:
        self._is_custom_speech = bool(value)
        self._save(KEY_IS_CUSTOM_SPEECH, self._is_custom_speech)

    def set_display_mode(self, mode: str) -> None:
        if mode not in DISPLAY_MODES:
            raise ValueError(f"unknown display mode: {mode}")
        self._display_mode = mode
        self._save(KEY_DISPLAY_MODE, mode)
        if mode != "full":
            self.set_hide_word_in_sentence(True)

    def set_hide_word_in_sentence(self, value: bool) -> None:
        self._hide_word_in_sentence = bool(value)
        self._save(KEY_HIDE_WORD_IN_SENTENCE, self._hide_word_in_sentence)

    def set_show_sentences(self, value: bool) -> None:
        self._show_sentences = bool(value)
        self._save(KEY_SHOW_SENTENCES, self._show_sentences)

    def set_show_sentence_translation(self, value: bool) -> None:
        self._show_sentence_translation = bool(value)
        self._save(KEY_SHOW_SENTENCE_TRANSLATION, self._show_sentence_translation)

    def snapshot(self) -> dict:
        return {
            "speech_config": self._speech_config.model_dump(),
            "is_custom_speech": self._is_custom_speech,
            "display_mode": self._display_mode,
            "hide_word_in_sentence": self._hide_word_in_sentence,
            "show_sentences": self._show_sentences,
            "show_sentence_translation": self._show_sentence_translation,
        }

    def _read(self, key: str) -> Any:
        try:
            raw = self.storage.get(key)
        except Exception as exc:
            logger.warning("error reading preference %s: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as exc:
            logger.warning("corrupt preference %s, using default: %s", key, exc)
            return None

    def _save(self, key: str, value: Any) -> None:
        try:
            self.storage.set(key, json.dumps(value))
        except Exception as exc:
            logger.warning("error writing preference %s: %s", key, exc)

    def _load_bool(self, key: str, default: bool) -> bool:
        value = self._read(key)
        return value if isinstance(value, bool) else default

    def _load_display_mode(self) -> str:
        value = self._read(KEY_DISPLAY_MODE)
        return value if value in DISPLAY_MODES else "hideRandom"

    def _load_speech_config(self) -> SpeechConfig:
        saved = self._read(KEY_SPEECH_CONFIG)
        if not isinstance(saved, dict):
            return DEFAULT_SPEECH_CONFIG
        merged = {**DEFAULT_SPEECH_CONFIG.model_dump(), **saved}
        try:
            merged["rate"] = _clamp_rate(merged.get("rate"))
            return SpeechConfig.model_validate(merged)
        except (TypeError, ValueError, ValidationError) as exc:
            logger.warning("invalid stored speech config, using defaults: %s", exc)
            return DEFAULT_SPEECH_CONFIG


def _clamp_rate(value: object) -> float:
    rate = float(value if value is not None else DEFAULT_SPEECH_CONFIG.rate)
    return round(min(MAX_RATE, max(MIN_RATE, rate)), 2)
