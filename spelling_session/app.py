from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from spelling_session.api.schemas import (
    KeyPressRequest,
    PeekRequest,
    PreferencesUpdateRequest,
    PronounceRequest,
    TriggerRequest,
)
from spelling_session.config import ensure_dirs
from spelling_session.host import PracticeHost
from spelling_session.logging_config import configure_logging
from spelling_session.models.plans import PlanDetails
from spelling_session.models.words import words_from_payload
from spelling_session.session.controller import LearningTrigger, MistakeReviewTrigger

logger = logging.getLogger(__name__)

host: PracticeHost | None = None


def get_host() -> PracticeHost:
    global host
    if host is None:
        host = PracticeHost.create()
    return host


@asynccontextmanager
async def lifespan(_app: FastAPI):
    ensure_dirs()
    configure_logging()
    get_host()
    yield


app = FastAPI(title="Spelling Session", version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/api/session")
async def session_state() -> dict:
    return {"ok": True, "session": get_host().state()}


@app.get("/api/session/events")
async def session_events() -> dict:
    return {"ok": True, **get_host().events()}


@app.post("/api/session/trigger")
async def session_trigger(req: TriggerRequest) -> dict:
    current = get_host()
    if req.mistake_words is not None:
        try:
            words = words_from_payload(req.mistake_words)
        except (KeyError, TypeError, ValueError) as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        trigger = MistakeReviewTrigger(words=tuple(words))
    else:
        if not req.list_code:
            raise HTTPException(status_code=400, detail="list_code is empty")
        action = req.action
        if action is not None and not isinstance(action, str):
            action = PlanDetails(
                type=action.type,
                value=action.value,
                review_strategy=action.review_strategy,
                learning_order=action.learning_order,
            )
        trigger = LearningTrigger(list_code=req.list_code, action=action)

    try:
        await current.controller.handle_trigger(trigger)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"ok": True, "session": current.state()}


@app.post("/api/session/mistakes/{plan_id}")
async def session_review_mistakes(plan_id: int) -> dict:
    current = get_host()
    await current.controller.review_mistakes(plan_id)
    return {"ok": True, "session": current.state()}


@app.post("/api/session/keys")
async def session_key(req: KeyPressRequest) -> dict:
    current = get_host()
    current.press(req.key, ctrl=req.ctrl, meta=req.meta, alt=req.alt)
    return {"ok": True, "session": current.state()}


@app.post("/api/session/next")
async def session_next() -> dict:
    current = get_host()
    current.controller.next()
    return {"ok": True, "session": current.state()}


@app.post("/api/session/prev")
async def session_prev() -> dict:
    current = get_host()
    current.controller.prev()
    return {"ok": True, "session": current.state()}


@app.post("/api/session/suspend")
async def session_suspend() -> dict:
    current = get_host()
    current.controller.suspend()
    return {"ok": True, "session": current.state()}


@app.post("/api/session/resume")
async def session_resume() -> dict:
    current = get_host()
    current.controller.resume()
    return {"ok": True, "session": current.state()}


@app.post("/api/session/home")
async def session_home() -> dict:
    current = get_host()
    current.controller.return_to_home()
    return {"ok": True, "session": current.state()}


@app.post("/api/session/advance")
async def session_advance() -> dict:
    current = get_host()
    advanced = await current.controller.advance_plan()
    return {"ok": advanced, "session": current.state()}


@app.post("/api/session/pronounce")
async def session_pronounce(req: PronounceRequest) -> dict:
    played = get_host().machine.play_pronunciation(req.kind)
    return {"ok": played}


@app.post("/api/session/peek")
async def session_peek(req: PeekRequest) -> dict:
    current = get_host()
    current.machine.peeking = req.on
    return {"ok": True, "session": current.state()}


@app.get("/api/preferences")
def preferences() -> dict:
    return {"ok": True, "preferences": get_host().settings.snapshot()}


@app.patch("/api/preferences")
def update_preferences(req: PreferencesUpdateRequest) -> dict:
    try:
        updated = get_host().update_preferences(req)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"ok": True, "preferences": updated}
