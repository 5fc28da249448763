from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from spelling_session.config import BackendSettings
from spelling_session.errors import BackendError
from spelling_session.services.backend import BackendClient

WORD_PAYLOAD = {
    "progressId": 41,
    "text": "ice cream",
    "pronunciation": {"uk": {"phonetic": "aɪs ˈkriːm"}, "us": {"phonetic": "ˈaɪs ˌkrim"}},
    "definitions": [{"pos": "n.", "meaning": "冰淇淋"}],
    "examples": {"general": [{"en": "I like ice cream.", "cn": "我喜欢冰淇淋。"}]},
}


def _client(handler) -> BackendClient:
    settings = BackendSettings(base_url="http://backend.test/api", token="secret", timeout_sec=5)
    return BackendClient(settings, transport=httpx.MockTransport(handler))


def test_fetch_words_sends_due_counts_and_parses_words():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json=[WORD_PAYLOAD])

    words = asyncio.run(_client(handler).fetch_words("cet4_core", 10, 5))

    assert seen == {
        "path": "/api/words/learning/cet4_core",
        "params": {"newCount": "10", "reviewCount": "5"},
        "auth": "Bearer secret",
    }
    assert words[0].progress_id == 41
    assert words[0].pronunciation.us.phonetic == "ˈaɪs ˌkrim"
    assert words[0].examples[0].cn == "我喜欢冰淇淋。"


def test_mistake_words_accept_wrapped_payload():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/plans/7/mistakes/review"
        return httpx.Response(200, json={"words": [WORD_PAYLOAD]})

    words = asyncio.run(_client(handler).fetch_mistake_words(7))
    assert [w.text for w in words] == ["ice cream"]


def test_update_progress_posts_quality():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(204)

    asyncio.run(_client(handler).update_progress(41, 5))

    assert seen == {"method": "POST", "path": "/api/words/progress/41", "body": {"quality": 5}}


def test_learning_list_is_parsed_into_plans():
    payload = [
        {
            "planId": 7,
            "listCode": "cet4_core",
            "isCurrent": True,
            "book": {"listCode": "cet4_core", "totalWords": 120},
            "plan": {"type": "customDays", "value": 30, "reviewStrategy": "SM2", "learningOrder": "RANDOM"},
            "progress": {"learnedCount": 20, "dueNewCount": 4, "dueReviewCount": 2, "learnedTodayCount": 1},
        }
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    plans = asyncio.run(_client(handler).fetch_learning_list())

    assert plans[0].plan.type == "customDays"
    assert plans[0].plan.review_strategy == "SM2"
    assert plans[0].progress.remaining_new_words == 100


def test_error_response_carries_server_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"message": "Plan already finished"})

    with pytest.raises(BackendError) as excinfo:
        asyncio.run(_client(handler).advance(7))

    assert str(excinfo.value) == "Plan already finished"
    assert excinfo.value.status_code == 409


def test_transport_errors_become_backend_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(BackendError):
        asyncio.run(_client(handler).fetch_learning_list())
