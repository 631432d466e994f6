import pytest

from wandersnap.schemas import SuggestionRequest


@pytest.fixture
def relaxed_request():
    return SuggestionRequest(
        locationContext="downtown Metropolis",
        mood="Relaxed",
        timeAvailable="1 hour",
        aiProvider="hosted",
    )


@pytest.fixture
def reading_nook():
    return {
        "name": "Quiet Reading Nook",
        "description": "Settle into a soft armchair with a book and a warm drink.",
        "category": "Relaxation",
        "estimatedDuration": "45 minutes",
        "locationHint": "corner cafe",
    }
