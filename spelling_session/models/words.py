from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PronunciationDetail:
    phonetic: str = ""
    speech_url: str | None = None


@dataclass(frozen=True)
class Pronunciation:
    uk: PronunciationDetail | None = None
    us: PronunciationDetail | None = None


@dataclass(frozen=True)
class Definition:
    pos: str
    meaning: str


@dataclass(frozen=True)
class ExampleSentence:
    en: str
    cn: str = ""
    en_highlighted: str = ""
    speech_url: str | None = None


@dataclass(frozen=True)
class Word:
    progress_id: int
    text: str
    pronunciation: Pronunciation = field(default_factory=Pronunciation)
    definitions: tuple[Definition, ...] = ()
    examples: tuple[ExampleSentence, ...] = ()


def word_from_payload(payload: dict) -> Word:
    if not isinstance(payload, dict):
        raise ValueError("word payload must be an object")
    text = str(payload.get("text") or "").strip()
    if not text:
        raise ValueError("word text is empty")
    raw_id = payload.get("progressId", payload.get("progress_id"))
    if raw_id is None:
        raise ValueError(f"word {text!r} has no progressId")

    return Word(
        progress_id=int(raw_id),
        text=text,
        pronunciation=_pronunciation_from_payload(payload.get("pronunciation")),
        definitions=tuple(_definitions_from_payload(payload.get("definitions"))),
        examples=tuple(_examples_from_payload(payload.get("examples"))),
    )


def words_from_payload(items: object) -> list[Word]:
    if isinstance(items, dict):
        items = items.get("words", [])
    if not isinstance(items, list):
        raise ValueError("word list payload must be an array")
    return [word_from_payload(item) for item in items]


def _pronunciation_from_payload(raw: object) -> Pronunciation:
    if not isinstance(raw, dict):
        return Pronunciation()
    return Pronunciation(uk=_detail(raw.get("uk")), us=_detail(raw.get("us")))


def _detail(raw: object) -> PronunciationDetail | None:
    if not isinstance(raw, dict):
        return None
    phonetic = str(raw.get("phonetic") or "").strip()
    speech = raw.get("speech") or raw.get("speechUrl")
    return PronunciationDetail(phonetic=phonetic, speech_url=str(speech) if speech else None)


def _definitions_from_payload(raw: object) -> list[Definition]:
    if not isinstance(raw, list):
        return []
    out: list[Definition] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        meaning = item.get("meaning", item.get("translation", ""))
        if isinstance(meaning, list):
            meaning = "; ".join(str(x) for x in meaning)
        out.append(Definition(pos=str(item.get("pos") or ""), meaning=str(meaning or "")))
    return out


def _examples_from_payload(raw: object) -> list[ExampleSentence]:
    if isinstance(raw, dict):
        raw = raw.get("general")
    if not isinstance(raw, list):
        return []
    out: list[ExampleSentence] = []
    for item in raw:
        if not isinstance(item, dict) or not str(item.get("en") or "").strip():
            continue
        out.append(
            ExampleSentence(
                en=str(item["en"]),
                cn=str(item.get("cn") or ""),
                en_highlighted=str(item.get("en_highlighted") or item["en"]),
                speech_url=item.get("speechUrl"),
            )
        )
    return out
