from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class PlanDetailsRequest(BaseModel):
    type: Literal["preset", "customDays", "customWords"]
    value: int = Field(ge=0)
    review_strategy: Literal["NONE", "EBBINGHAUS", "SM2", "LEITNER"] = Field(default="EBBINGHAUS")
    learning_order: Literal["SEQUENTIAL", "RANDOM"] = Field(default="SEQUENTIAL")


class TriggerRequest(BaseModel):
    list_code: str | None = None
    action: Literal["activate", "reset"] | PlanDetailsRequest | None = None
    mistake_words: list[dict] | None = None


class KeyPressRequest(BaseModel):
    key: str = Field(min_length=1, max_length=16)
    ctrl: bool = False
    meta: bool = False
    alt: bool = False


class PronounceRequest(BaseModel):
    kind: Literal["uk", "us"] | None = None


class PeekRequest(BaseModel):
    on: bool


class SpeechConfigUpdate(BaseModel):
    accent: Literal["en-GB", "en-US"] | None = None
    rate: float | None = Field(default=None, ge=0.5, le=1.5)
    volume: float | None = Field(default=None, ge=0, le=1)
    pitch: float | None = Field(default=None, ge=0, le=2)
    gender: Literal["auto", "male", "female"] | None = None


class PreferencesUpdateRequest(BaseModel):
    speech: SpeechConfigUpdate | None = None
    is_custom_speech: bool | None = None
    display_mode: Literal["full", "hideVowels", "hideConsonants", "hideRandom", "hideAll"] | None = None
    hide_word_in_sentence: bool | None = None
    show_sentences: bool | None = None
    show_sentence_translation: bool | None = None
