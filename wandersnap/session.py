"""Per-session view state for the activity finder.

Each browser session owns one ``SearchSession``; every change goes through
its methods. Searches are numbered so that work belonging to an older search
(late image results, mostly) can be recognised and dropped.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Set
from uuid import uuid4

from pydantic import BaseModel, Field, ValidationError

from .activities import Activity, UserLocation, location_context, render_card, to_activities
from .ai_image_generation import generate_activity_image
from .config import SESSION_TIMEOUT_MINUTES
from .errors import GeocodingError, SuggestionError, TransportError
from .geocode import reverse_geocode
from .schemas import AIProvider, SuggestionRequest, SuggestionResponse
from .suggestions import PROVIDER_HINTS, PROVIDER_LABELS, get_suggestions

logger = logging.getLogger(__name__)

SESSION_TIMEOUT = timedelta(minutes=SESSION_TIMEOUT_MINUTES)
NEARBY_AREA = "Nearby Area"

SuggestionFetcher = Callable[[SuggestionRequest], Awaitable[SuggestionResponse]]
ImageGenerator = Callable[[str], Awaitable[Optional[str]]]
Geocoder = Callable[[float, float], Awaitable[str]]


class SearchStatus(str, Enum):
    READY = "ready"
    LOADING = "loading"
    RESULTS = "results"
    EMPTY = "empty"
    ERROR = "error"


STATUS_MESSAGES = {
    SearchStatus.READY: (
        "Ready to Explore?",
        "Detect your location, select your current mood and available time, "
        "then hit \"Find Activities\" to get AI-powered suggestions!",
    ),
    SearchStatus.LOADING: ("Snapping up adventures with AI...", ""),
    SearchStatus.EMPTY: (
        "No AI suggestions found for these settings.",
        "Try adjusting your mood, time, or location.",
    ),
}


class Notification(BaseModel):
    title: str
    description: str = ""
    variant: str = "default"


class SearchSession(BaseModel):
    id: str = Field(default_factory=lambda: uuid4().hex)
    createdAt: datetime = Field(default_factory=datetime.utcnow)
    location: Optional[UserLocation] = None
    locationDisplayName: Optional[str] = None
    mood: Optional[str] = None
    timeAvailable: Optional[str] = None
    preferences: Optional[str] = None
    aiProvider: AIProvider = AIProvider.HOSTED
    activities: List[Activity] = Field(default_factory=list)
    status: SearchStatus = SearchStatus.READY
    searchId: int = 0
    errorMessage: Optional[str] = None
    notifications: List[Notification] = Field(default_factory=list)

    def notify(self, title: str, description: str = "", variant: str = "default") -> Notification:
        note = Notification(title=title, description=description, variant=variant)
        self.notifications.append(note)
        return note

    def drain_notifications(self) -> List[Notification]:
        notes, self.notifications = self.notifications, []
        return notes

    def set_location(self, location: Optional[UserLocation]) -> None:
        self.location = location
        self.locationDisplayName = None

    def set_location_name(self, name: Optional[str]) -> None:
        self.locationDisplayName = name.strip() if name and name.strip() else None

    def set_mood(self, mood: Optional[str]) -> None:
        self.mood = mood or None

    def set_time_available(self, time_available: Optional[str]) -> None:
        self.timeAvailable = time_available or None

    def set_preferences(self, preferences: Optional[str]) -> None:
        self.preferences = preferences.strip() if preferences and preferences.strip() else None

    def set_provider(self, provider: AIProvider) -> None:
        self.aiProvider = provider

    def missing_inputs(self) -> List[Notification]:
        missing: List[Notification] = []
        if not self.location and not self.locationDisplayName:
            missing.append(Notification(
                title="Missing Location",
                description="Please detect your location first.",
                variant="destructive",
            ))
        if not self.mood:
            missing.append(Notification(
                title="Missing Mood", description="Please select your mood.", variant="destructive",
            ))
        if not self.timeAvailable:
            missing.append(Notification(
                title="Missing Time",
                description="Please select your available time.",
                variant="destructive",
            ))
        return missing

    def build_request(self) -> SuggestionRequest:
        return SuggestionRequest(
            locationContext=location_context(self.locationDisplayName, self.location),
            mood=self.mood or "",
            timeAvailable=self.timeAvailable or "",
            preferences=self.preferences,
            aiProvider=self.aiProvider,
        )

    def begin_search(self) -> int:
        self.searchId += 1
        self.activities = []
        self.errorMessage = None
        self.status = SearchStatus.LOADING
        return self.searchId

    def finish_search(self, search_id: int, activities: List[Activity]) -> bool:
        if search_id != self.searchId:
            return False
        self.activities = list(activities)
        self.status = SearchStatus.RESULTS if activities else SearchStatus.EMPTY
        return True

    def fail_search(self, search_id: int, message: str) -> bool:
        if search_id != self.searchId:
            return False
        self.activities = []
        self.errorMessage = message
        self.status = SearchStatus.ERROR
        return True

    def patch_photo(self, search_id: int, activity_id: str, photo_url: str) -> bool:
        """Replace one card's photo if it still belongs to the current search."""
        if search_id != self.searchId:
            return False
        for activity in self.activities:
            if activity.id == activity_id:
                activity.photoUrl = photo_url
                return True
        return False

    def view(self) -> dict:
        title, detail = STATUS_MESSAGES.get(self.status, ("", ""))
        if self.status is SearchStatus.ERROR:
            title, detail = "AI Suggestion Error", self.errorMessage or ""
        return {
            "id": self.id,
            "status": self.status.value,
            "searchId": self.searchId,
            "message": {"title": title, "detail": detail},
            "location": self.location.model_dump() if self.location else None,
            "locationDisplayName": self.locationDisplayName,
            "mood": self.mood,
            "timeAvailable": self.timeAvailable,
            "preferences": self.preferences,
            "aiProvider": self.aiProvider.value,
            "canSearch": not self.missing_inputs() and self.status is not SearchStatus.LOADING,
            "activities": [render_card(a, self.locationDisplayName) for a in self.activities],
            "notifications": [n.model_dump() for n in self.drain_notifications()],
        }


class SessionStore:
    def __init__(self, timeout: timedelta = SESSION_TIMEOUT) -> None:
        self.timeout = timeout
        self._sessions: Dict[str, SearchSession] = {}

    def _cleanup(self) -> None:
        now = datetime.utcnow()
        expired = [sid for sid, s in self._sessions.items() if now - s.createdAt > self.timeout]
        for sid in expired:
            self._sessions.pop(sid, None)

    def create(self) -> SearchSession:
        self._cleanup()
        session = SearchSession()
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> Optional[SearchSession]:
        self._cleanup()
        return self._sessions.get(session_id)

    def __len__(self) -> int:
        return len(self._sessions)


_background_tasks: Set[asyncio.Task] = set()


async def detect_location(
    session: SearchSession,
    lat: float,
    lng: float,
    geocoder: Geocoder = reverse_geocode,
) -> str:
    session.set_location(UserLocation(lat=lat, lng=lng))
    session.notify("Coordinates detected!", "Fetching location name...")
    try:
        name = await geocoder(lat, lng)
    except GeocodingError as exc:
        logger.warning("Error fetching location name: %s", exc)
        session.set_location_name(NEARBY_AREA)
        if exc.status is not None:
            session.notify("Location Name Info", "Could not fetch specific place name, using coordinates.")
        else:
            session.notify("Location Name Error", "Could not fetch place name, using coordinates.")
        return NEARBY_AREA
    session.set_location_name(name)
    session.notify("Location Identified!", name)
    return name


def _error_message(exc: SuggestionError, provider: AIProvider) -> str:
    message = f"Could not get suggestions from {PROVIDER_LABELS[provider]}. Please try again."
    if isinstance(exc, TransportError):
        message = f"{message} {PROVIDER_HINTS[provider]}"
    return message


async def _load_image(
    session: SearchSession,
    search_id: int,
    activity_id: str,
    keywords: str,
    image_generator: ImageGenerator,
) -> None:
    data_uri = await image_generator(keywords)
    if data_uri and not session.patch_photo(search_id, activity_id, data_uri):
        logger.info("Dropping image for activity %s from superseded search %d", activity_id, search_id)


def schedule_images(
    session: SearchSession,
    search_id: int,
    image_generator: ImageGenerator = generate_activity_image,
) -> List[asyncio.Task]:
    tasks = []
    for activity in session.activities:
        keywords = activity.imageKeywords or activity.dataAiHint
        task = asyncio.create_task(
            _load_image(session, search_id, activity.id, keywords, image_generator)
        )
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)
        tasks.append(task)
    return tasks


async def find_activities(
    session: SearchSession,
    fetcher: SuggestionFetcher = get_suggestions,
    image_generator: Optional[ImageGenerator] = generate_activity_image,
) -> List[asyncio.Task]:
    """Run one search for the session and start image generation for its cards.

    Returns the image tasks (empty when the search did not produce cards).
    """
    missing = session.missing_inputs()
    if missing:
        # one prompt at a time, starting with the earliest missing selection
        session.notifications.append(missing[0])
        return []

    try:
        request = session.build_request()
    except ValidationError as exc:
        session.notify("Invalid Selection", str(exc), variant="destructive")
        return []

    search_id = session.begin_search()
    try:
        result = await fetcher(request)
    except SuggestionError as exc:
        logger.error("Error fetching or processing AI suggestions: %s", exc, exc_info=True)
        message = _error_message(exc, request.aiProvider)
        if session.fail_search(search_id, message):
            session.notify("AI Suggestion Error", message, variant="destructive")
        return []
    except Exception as exc:
        logger.error("Unexpected error fetching AI suggestions: %s", exc, exc_info=True)
        message = f"Could not get suggestions from {PROVIDER_LABELS[request.aiProvider]}. Please try again."
        if session.fail_search(search_id, message):
            session.notify("AI Suggestion Error", message, variant="destructive")
        return []

    activities = to_activities(result.suggestions, session.location)
    if not session.finish_search(search_id, activities):
        return []
    if not activities:
        session.notify(
            "No Suggestions",
            "The AI couldn't find any suggestions for your criteria. Try different options!",
        )
        return []
    if image_generator is None:
        return []
    return schedule_images(session, search_id, image_generator)
