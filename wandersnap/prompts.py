from __future__ import annotations

import json
from typing import Optional

from .schemas import CATEGORIES, MAX_SUGGESTIONS, SuggestionRequest

PERSONA = (
    "You are WanderSnap, a friendly and creative AI assistant helping users discover activities."
)

EXAMPLE_SUGGESTION = {
    "name": "Explore the Secret Garden",
    "description": (
        "Unwind and find tranquility in this hidden gem. "
        "A calm detour that fits neatly into a short break."
    ),
    "category": "Outdoors",
    "estimatedDuration": "approx. 40 min",
    "locationHint": "a secluded spot in the city park",
    "imageKeywords": "secret garden",
}


def build_suggestion_prompt(request: SuggestionRequest) -> str:
    lines = [
        PERSONA,
        "Based on the user's location context, mood, available time, and preferences, "
        "generate diverse and engaging activity suggestions.",
        "",
        f"User's Location Context: {request.locationContext}",
        f"User's Mood: {request.mood}",
        f"Time Available: {request.timeAvailable}",
    ]
    if request.preferences:
        lines.append(f"User's Preferences: {request.preferences}")
    lines += [
        "",
        "For each suggestion, provide:",
        "- A catchy 'name'.",
        "- A 'description' (2-3 sentences) that is engaging and tailored to the mood and time above.",
        f"- A 'category' from the following list: {', '.join(CATEGORIES)}.",
        "- An 'estimatedDuration' that fits within the available time.",
        "- A general 'locationHint' (e.g. \"a bustling market area\", \"a quiet riverside path\").",
        "- Optionally 'imageKeywords': one or two words describing a representative photo.",
        "",
        "Example of a single suggestion object:",
        json.dumps(EXAMPLE_SUGGESTION, indent=2),
        "",
        "Return a single JSON object with exactly one top-level key \"suggestions\", "
        f"whose value is an array of 0 to {MAX_SUGGESTIONS} suggestion objects. "
        "Return only the JSON object, with no markdown fences, commentary, or other text.",
    ]
    return "\n".join(lines)


def build_image_prompt(keywords: str) -> str:
    return (
        "Generate a vibrant and appealing photorealistic image suitable for a travel app suggestion, "
        f"representing: \"{keywords.strip()}\". "
        "Focus on a clear subject, with a slightly artistic touch. Avoid text in the image."
    )


def build_summary_prompt(
    activity_description: str,
    mood: str,
    time_available: str,
    preferences: Optional[str] = None,
) -> str:
    return (
        "You are an AI assistant designed to provide concise and engaging summaries of activities, "
        "tailored to the user's current mood, available time, and known preferences.\n\n"
        "Given the following activity description, mood, time constraints, and preferences, "
        "generate a summary that helps the user quickly decide if the activity is suitable for them.\n\n"
        f"Activity Description: {activity_description}\n"
        f"Mood: {mood}\n"
        f"Time Available: {time_available}\n"
        f"Preferences: {preferences.strip() if preferences and preferences.strip() else 'None'}\n\n"
        "Summary:"
    )
