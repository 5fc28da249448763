from __future__ import annotations

import logging
from typing import Any

import httpx

from spelling_session.config import BackendSettings
from spelling_session.errors import BackendError
from spelling_session.models.plans import LearningPlan, learning_plan_from_payload
from spelling_session.models.words import Word, words_from_payload

logger = logging.getLogger(__name__)


class BackendClient:
    """HTTP collaborator for word batches, progress sync and plan state.

    Implements the word provider, progress sync, plan advance and plan
    snapshot roles the session engine consumes.
    """

    def __init__(
        self,
        settings: BackendSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or BackendSettings.from_env()
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        headers = {"Accept": "application/json"}
        if self.settings.token:
            headers["Authorization"] = f"Bearer {self.settings.token}"
        return httpx.AsyncClient(
            base_url=self.settings.base_url.rstrip("/"),
            headers=headers,
            timeout=self.settings.timeout_sec,
            transport=self._transport,
        )

    async def fetch_words(self, list_code: str, due_new: int, due_review: int) -> list[Word]:
        payload = await self._request(
            "GET",
            f"/words/learning/{list_code}",
            params={"newCount": due_new, "reviewCount": due_review},
            fallback="Failed to fetch learning words.",
        )
        words = words_from_payload(payload)
        logger.info("fetched %s words for %s (new=%s review=%s)", len(words), list_code, due_new, due_review)
        return words

    async def fetch_mistake_words(self, plan_id: int) -> list[Word]:
        payload = await self._request(
            "GET",
            f"/plans/{plan_id}/mistakes/review",
            fallback="Failed to fetch mistake review words.",
        )
        return words_from_payload(payload)

    async def update_progress(self, progress_id: int, quality: int) -> None:
        await self._request(
            "POST",
            f"/words/progress/{progress_id}",
            json={"quality": quality},
            fallback="Failed to update word progress.",
        )

    async def advance(self, plan_id: int) -> None:
        await self._request("POST", f"/plans/{plan_id}/advance", fallback="Failed to advance learning plan.")

    async def fetch_learning_list(self) -> list[LearningPlan]:
        payload = await self._request("GET", "/plans", fallback="Failed to fetch learning list.")
        if not isinstance(payload, list):
            raise BackendError("learning list payload must be an array")
        return [learning_plan_from_payload(item) for item in payload if isinstance(item, dict)]

    async def _request(self, method: str, path: str, *, fallback: str, **kwargs: Any) -> Any:
        try:
            async with self._client() as client:
                resp = await client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise BackendError(f"{fallback} {exc}".strip()) from exc

        if resp.status_code >= 400:
            raise BackendError(_error_message(resp, fallback), status_code=resp.status_code)
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise BackendError(f"{fallback} invalid JSON response", status_code=resp.status_code) from exc


def _error_message(resp: httpx.Response, fallback: str) -> str:
    try:
        payload = resp.json()
    except ValueError:
        return fallback
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("detail") or payload.get("error")
        if isinstance(message, list):
            message = "; ".join(str(x) for x in message)
        if message:
            return str(message)
    return fallback
