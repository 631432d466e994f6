# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from typing import Optional

from fastapi import Body, FastAPI, HTTPException, Path
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .activities import MOOD_OPTIONS, TIME_OPTIONS
from .ai_image_generation import generate_activity_image
from .ai_image_generation import router as image_router
from .config import API_PREFIX, CORS_ALLOW_ORIGINS
from .geocode import reverse_geocode
from .geocode import router as geocode_router
from .schemas import CATEGORIES, AIProvider
from .session import SearchSession, SessionStore, detect_location, find_activities
from .suggestions import PROVIDER_LABELS, get_suggestions
from .suggestions import router as suggestions_router
from .summarize import router as summarize_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="WanderSnap API", version="0.1.0")

app.include_router(suggestions_router)
app.include_router(image_router)
app.include_router(summarize_router)
app.include_router(geocode_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

sessions = SessionStore()


class LocationUpdate(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class SelectionsUpdate(BaseModel):
    locationName: Optional[str] = None
    mood: Optional[str] = None
    timeAvailable: Optional[str] = None
    preferences: Optional[str] = None
    aiProvider: Optional[AIProvider] = None


def _session_or_404(session_id: str) -> SearchSession:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown or expired session '{session_id}'.")
    return session


@app.get(f"{API_PREFIX}/health")
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@app.get(f"{API_PREFIX}/options")
def options():
    return JSONResponse({
        "moods": MOOD_OPTIONS,
        "timeOptions": TIME_OPTIONS,
        "providers": [{"value": p.value, "label": PROVIDER_LABELS[p]} for p in AIProvider],
        "categories": CATEGORIES,
    })


@app.post(f"{API_PREFIX}/sessions")
def create_session():
    session = sessions.create()
    logger.info("Created session %s", session.id)
    return JSONResponse(session.view(), status_code=201)


@app.get(f"{API_PREFIX}/sessions/{{session_id}}")
def get_session(session_id: str = Path(...)):
    return JSONResponse(_session_or_404(session_id).view())


@app.post(f"{API_PREFIX}/sessions/{{session_id}}/location")
async def set_location(session_id: str = Path(...), body: LocationUpdate = Body(...)):
    session = _session_or_404(session_id)
    await detect_location(session, body.lat, body.lng, geocoder=reverse_geocode)
    return JSONResponse(session.view())


@app.put(f"{API_PREFIX}/sessions/{{session_id}}/selections")
def update_selections(session_id: str = Path(...), body: SelectionsUpdate = Body(...)):
    session = _session_or_404(session_id)
    provided = body.model_fields_set
    if "locationName" in provided:
        session.set_location_name(body.locationName)
    if "mood" in provided:
        session.set_mood(body.mood)
    if "timeAvailable" in provided:
        session.set_time_available(body.timeAvailable)
    if "preferences" in provided:
        session.set_preferences(body.preferences)
    if "aiProvider" in provided and body.aiProvider is not None:
        session.set_provider(body.aiProvider)
    return JSONResponse(session.view())


@app.post(f"{API_PREFIX}/sessions/{{session_id}}/find-activities")
async def find_session_activities(session_id: str = Path(...)):
    session = _session_or_404(session_id)
    await find_activities(
        session,
        fetcher=get_suggestions,
        image_generator=generate_activity_image,
    )
    return JSONResponse(session.view())
