from __future__ import annotations

import json
import logging

import pytest

from spelling_session.runtime.kv import MemoryKeyValueStore, SqliteKeyValueStore
from spelling_session.settings.store import (
    KEY_DISPLAY_MODE,
    KEY_HIDE_WORD_IN_SENTENCE,
    KEY_SHOW_SENTENCES,
    KEY_SPEECH_CONFIG,
    SettingsStore,
)


class BrokenStore:
    def get(self, key):
        raise OSError("disk gone")

    def set(self, key, value):
        raise OSError("disk full")

    def remove(self, key):
        raise OSError("disk gone")


def test_defaults_when_storage_is_empty():
    settings = SettingsStore(MemoryKeyValueStore())

    assert settings.speech_config.accent == "en-GB"
    assert settings.speech_config.rate == 0.8
    assert settings.is_custom_speech is False
    assert settings.display_mode == "hideRandom"
    assert settings.hide_word_in_sentence is True
    assert settings.show_sentences is False
    assert settings.show_sentence_translation is True


def test_corrupt_entry_falls_back_without_touching_other_keys():
    storage = MemoryKeyValueStore(
        {
            KEY_DISPLAY_MODE: "{not json",
            KEY_SHOW_SENTENCES: "true",
        }
    )
    settings = SettingsStore(storage)

    assert settings.display_mode == "hideRandom"
    assert settings.show_sentences is True


def test_unknown_display_mode_and_wrong_types_fall_back():
    storage = MemoryKeyValueStore(
        {
            KEY_DISPLAY_MODE: json.dumps("hideEverything"),
            KEY_SHOW_SENTENCES: json.dumps("yes"),
        }
    )
    settings = SettingsStore(storage)

    assert settings.display_mode == "hideRandom"
    assert settings.show_sentences is False


def test_partial_speech_config_is_merged_over_defaults():
    storage = MemoryKeyValueStore({KEY_SPEECH_CONFIG: json.dumps({"accent": "en-US", "rate": 3})})
    settings = SettingsStore(storage)

    assert settings.speech_config.accent == "en-US"
    assert settings.speech_config.rate == 1.5
    assert settings.speech_config.gender == "auto"


def test_invalid_speech_config_uses_defaults():
    storage = MemoryKeyValueStore({KEY_SPEECH_CONFIG: json.dumps({"accent": "fr-FR"})})
    settings = SettingsStore(storage)

    assert settings.speech_config.accent == "en-GB"


def test_each_change_writes_its_own_key():
    storage = MemoryKeyValueStore()
    settings = SettingsStore(storage)

    settings.set_show_sentences(True)
    settings.set_speech_config(accent="en-US", rate=1.1)

    assert json.loads(storage.data[KEY_SHOW_SENTENCES]) is True
    saved = json.loads(storage.data[KEY_SPEECH_CONFIG])
    assert saved["accent"] == "en-US"
    assert saved["lang"] == "en-US"
    assert saved["rate"] == 1.1
    assert KEY_DISPLAY_MODE not in storage.data


def test_display_mode_change_forces_hiding_word_in_sentence():
    settings = SettingsStore(MemoryKeyValueStore())
    settings.set_display_mode("full")
    settings.set_hide_word_in_sentence(False)

    settings.set_display_mode("full")
    assert settings.hide_word_in_sentence is False

    settings.set_display_mode("hideVowels")
    assert settings.hide_word_in_sentence is True


def test_cross_field_rule_is_not_applied_on_load():
    storage = MemoryKeyValueStore(
        {
            KEY_DISPLAY_MODE: json.dumps("hideAll"),
            KEY_HIDE_WORD_IN_SENTENCE: json.dumps(False),
        }
    )
    settings = SettingsStore(storage)

    assert settings.display_mode == "hideAll"
    assert settings.hide_word_in_sentence is False


def test_unknown_display_mode_is_rejected_on_set():
    settings = SettingsStore(MemoryKeyValueStore())
    with pytest.raises(ValueError):
        settings.set_display_mode("upsideDown")


def test_storage_failures_are_logged_and_swallowed(caplog):
    caplog.set_level(logging.WARNING)
    settings = SettingsStore(BrokenStore())

    assert settings.display_mode == "hideRandom"
    settings.set_show_sentences(True)

    assert settings.show_sentences is True
    assert "error writing preference" in caplog.text


def test_sqlite_store_survives_a_new_settings_instance(tmp_path):
    storage = SqliteKeyValueStore(tmp_path / "prefs" / "preferences.db")
    SettingsStore(storage).set_display_mode("hideConsonants")

    reloaded = SettingsStore(SqliteKeyValueStore(tmp_path / "prefs" / "preferences.db"))
    assert reloaded.display_mode == "hideConsonants"

    storage.remove(KEY_DISPLAY_MODE)
    assert storage.get(KEY_DISPLAY_MODE) is None
