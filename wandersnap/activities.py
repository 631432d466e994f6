from __future__ import annotations

from typing import Iterable, List, Optional, Tuple
from urllib.parse import quote, urlencode
from uuid import uuid4

from pydantic import BaseModel

from .schemas import ActivitySuggestion

PLACEHOLDER_PHOTO_URL = "https://placehold.co/600x400.png"
DEFAULT_ICON = "building"

MOOD_OPTIONS = [
    {"value": "Happy", "label": "Happy", "icon": "smile"},
    {"value": "Relaxed", "label": "Relaxed", "icon": "coffee"},
    {"value": "Adventurous", "label": "Adventurous", "icon": "mountain-snow"},
    {"value": "Curious", "label": "Curious", "icon": "search"},
    {"value": "Energetic", "label": "Energetic", "icon": "zap"},
    {"value": "Educational", "label": "Educational", "icon": "library"},
]

TIME_OPTIONS = [
    {"value": "30 minutes", "label": "30 minutes"},
    {"value": "1 hour", "label": "1 hour"},
    {"value": "2 hours", "label": "2 hours"},
    {"value": "Half-day", "label": "Half-day (4h)"},
    {"value": "Full-day", "label": "Full-day (8h)"},
]

# Checked in order; the first rule with a matching keyword wins.
CATEGORY_ICON_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("food", "restaurant", "cafe"), "utensils"),
    (("outdoor", "park", "nature", "garden"), "trees"),
    (("art", "museum", "gallery", "culture"), "palette"),
    (("relax", "chill", "peaceful"), "coffee"),
    (("adventure", "explore", "thrill"), "mountain-snow"),
    (("shop", "market", "boutique"), "shopping-bag"),
    (("sightsee", "historic", "landmark", "tourist"), "landmark"),
    (("entertain", "movie", "show", "game"), "film"),
    (("sport", "active", "fitness"), "bike"),
    (("wellnes", "health", "spa"), "heart-pulse"),
    (("education", "learn", "knowledge"), "library"),
]


class UserLocation(BaseModel):
    lat: float
    lng: float


class CardAction(BaseModel):
    label: str
    url: Optional[str] = None
    enabled: bool = False


class Activity(BaseModel):
    id: str
    name: str
    description: str
    photoUrl: str = PLACEHOLDER_PHOTO_URL
    dataAiHint: str
    location: Optional[UserLocation] = None
    locationHint: Optional[str] = None
    category: str
    categoryIcon: str
    estimatedDuration: Optional[str] = None
    imageKeywords: Optional[str] = None


def map_category_to_icon(category: Optional[str]) -> str:
    lower = (category or "").lower()
    for keywords, icon in CATEGORY_ICON_RULES:
        if any(keyword in lower for keyword in keywords):
            return icon
    return DEFAULT_ICON


def _ai_hint(suggestion: ActivitySuggestion) -> str:
    if suggestion.imageKeywords:
        return suggestion.imageKeywords.lower()
    first_word = suggestion.name.split()[0].lower() if suggestion.name.split() else ""
    return f"{suggestion.category.lower()} {first_word}".strip()


def to_activity(suggestion: ActivitySuggestion, location: Optional[UserLocation] = None) -> Activity:
    return Activity(
        id=str(uuid4()),
        name=suggestion.name,
        description=suggestion.description,
        dataAiHint=_ai_hint(suggestion),
        location=location,
        locationHint=suggestion.locationHint or None,
        category=suggestion.category,
        categoryIcon=map_category_to_icon(suggestion.category),
        estimatedDuration=suggestion.estimatedDuration or None,
        imageKeywords=suggestion.imageKeywords,
    )


def to_activities(
    suggestions: Iterable[ActivitySuggestion],
    location: Optional[UserLocation] = None,
) -> List[Activity]:
    return [to_activity(suggestion, location) for suggestion in suggestions]


def location_context(display_name: Optional[str], location: Optional[UserLocation]) -> str:
    if display_name:
        return display_name
    if location:
        return f"area around {location.lat:.2f}, {location.lng:.2f}"
    return "my current area"


def card_action(activity: Activity, location_display_name: Optional[str] = None) -> CardAction:
    """Directions when coordinates are known, otherwise a map or web search."""
    if activity.location:
        params = urlencode({"api": 1, "destination": f"{activity.location.lat},{activity.location.lng}"})
        return CardAction(
            label="Get Directions",
            url=f"https://www.google.com/maps/dir/?{params}",
            enabled=True,
        )
    if activity.name and location_display_name:
        query = f"{quote(activity.name)}+near+{quote(location_display_name)}"
        return CardAction(
            label="Find on Map / Search",
            url=f"https://www.google.com/maps/search/?api=1&query={query}",
            enabled=True,
        )
    if activity.name and activity.locationHint:
        query = f"{quote(activity.name)}+{quote(activity.locationHint)}"
        return CardAction(
            label="Find on Map / Search",
            url=f"https://www.google.com/search?q={query}",
            enabled=True,
        )
    if activity.name:
        return CardAction(
            label="More Info",
            url=f"https://www.google.com/search?q={quote(activity.name)}",
            enabled=False,
        )
    return CardAction(label="More Info")


def render_card(activity: Activity, location_display_name: Optional[str] = None) -> dict:
    card = activity.model_dump()
    card["action"] = card_action(activity, location_display_name).model_dump()
    return card
