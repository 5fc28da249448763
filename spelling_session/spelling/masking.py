from __future__ import annotations

import random
import re

VOWELS = set("aeiouAEIOU")
INPUT_CHAR_RE = re.compile(r"[A-Za-z']")
INFLECTION_SUFFIX = r"(?:s|es|d|ed|ing)?"


def is_input_char(char: str) -> bool:
    return bool(INPUT_CHAR_RE.fullmatch(char))


def is_skippable_char(char: str) -> bool:
    return char == " "


def input_indices(text: str) -> list[int]:
    return [idx for idx, char in enumerate(text) if is_input_char(char)]


def hidden_indices(text: str, mode: str) -> frozenset[int]:
    """Indices the display mode hides until they are typed."""
    letters = input_indices(text)
    if mode == "hideVowels":
        return frozenset(idx for idx in letters if text[idx] in VOWELS)
    if mode == "hideConsonants":
        return frozenset(idx for idx in letters if text[idx].isalpha() and text[idx] not in VOWELS)
    if mode == "hideRandom":
        if not letters:
            return frozenset()
        # seeded by the word so the mask stays put between renders
        count = min(len(letters), len(letters) // 2 + 1)
        return frozenset(random.Random(text).sample(letters, count))
    if mode == "hideAll":
        return frozenset(letters)
    return frozenset()


def mask_sentence(sentence: str, word: str, *, placeholder: str = "_") -> str:
    target = word.strip()
    if not target:
        return sentence
    pattern = re.compile(rf"(?<![A-Za-z]){re.escape(target)}{INFLECTION_SUFFIX}(?![A-Za-z])", re.IGNORECASE)

    def _hide(match: re.Match) -> str:
        return "".join(char if char == " " else placeholder for char in match.group(0))

    return pattern.sub(_hide, sentence)
