from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_SUGGESTIONS = 10

CATEGORIES = [
    "Food",
    "Outdoors",
    "Arts",
    "Relaxation",
    "Adventure",
    "Shopping",
    "Sightseeing",
    "Entertainment",
    "Sports",
    "Wellness",
]


class AIProvider(str, Enum):
    HOSTED = "hosted"
    LOCAL = "local"


class SuggestionRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    locationContext: str
    mood: str
    timeAvailable: str
    preferences: Optional[str] = None
    aiProvider: AIProvider = AIProvider.HOSTED

    @field_validator("locationContext", "mood", "timeAvailable")
    @classmethod
    def ensure_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Value must not be blank")
        return value

    @field_validator("preferences")
    @classmethod
    def blank_preferences_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()


class ActivitySuggestion(BaseModel):
    name: str = Field(min_length=1)
    description: str
    category: str
    estimatedDuration: str
    locationHint: str
    imageKeywords: Optional[str] = None

    @field_validator("imageKeywords")
    @classmethod
    def limit_keywords(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        words = value.split()
        if not words:
            return None
        return " ".join(words[:2])


class SuggestionResponse(BaseModel):
    suggestions: list[ActivitySuggestion] = Field(max_length=MAX_SUGGESTIONS)


class ImageGenerationRequest(BaseModel):
    keywords: str = ""


class ImageGenerationResponse(BaseModel):
    imageDataUri: Optional[str] = None


class SummarizeActivityRequest(BaseModel):
    activityDescription: str
    mood: str
    timeAvailable: str
    preferences: Optional[str] = None


class SummarizeActivityResponse(BaseModel):
    summary: str


def suggestion_response_schema() -> dict[str, Any]:
    # Declared output shape for schema-constrained generation
    return {
        "type": "OBJECT",
        "properties": {
            "suggestions": {
                "type": "ARRAY",
                "items": {
                    "type": "OBJECT",
                    "properties": {
                        "name": {
                            "type": "STRING",
                            "description": "The concise and catchy name of the suggested activity.",
                        },
                        "description": {
                            "type": "STRING",
                            "description": "An engaging description of the activity (2-3 sentences).",
                        },
                        "category": {
                            "type": "STRING",
                            "description": "One of: " + ", ".join(CATEGORIES) + ".",
                        },
                        "estimatedDuration": {"type": "STRING"},
                        "locationHint": {"type": "STRING"},
                        "imageKeywords": {
                            "type": "STRING",
                            "nullable": True,
                            "description": "One or two words describing a representative image.",
                        },
                    },
                    "required": [
                        "name",
                        "description",
                        "category",
                        "estimatedDuration",
                        "locationHint",
                    ],
                },
                "maxItems": MAX_SUGGESTIONS,
            },
        },
        "required": ["suggestions"],
    }
