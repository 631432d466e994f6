import asyncio
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from wandersnap.activities import UserLocation
from wandersnap.errors import GeocodingError, MalformedOutputError, TransportError
from wandersnap.schemas import AIProvider, SuggestionResponse
from wandersnap.session import (
    NEARBY_AREA,
    SearchSession,
    SearchStatus,
    SessionStore,
    detect_location,
    find_activities,
)


@pytest.fixture
def session():
    s = SearchSession()
    s.set_location(UserLocation(lat=40.0, lng=-74.0))
    s.set_location_name("downtown Metropolis")
    s.set_mood("Relaxed")
    s.set_time_available("1 hour")
    return s


def test_new_session_is_ready():
    view = SearchSession().view()

    assert view["status"] == "ready"
    assert view["message"]["title"] == "Ready to Explore?"
    assert view["activities"] == []
    assert view["canSearch"] is False


@pytest.mark.asyncio
async def test_missing_inputs_block_the_search():
    s = SearchSession()
    fetcher = AsyncMock()

    await find_activities(s, fetcher=fetcher, image_generator=None)

    fetcher.assert_not_called()
    assert s.status is SearchStatus.READY
    assert [(n.title, n.variant) for n in s.notifications] == [("Missing Location", "destructive")]


@pytest.mark.asyncio
async def test_only_the_first_missing_selection_is_reported():
    s = SearchSession()
    s.set_location_name("downtown Metropolis")

    await find_activities(s, fetcher=AsyncMock(), image_generator=None)

    assert [n.title for n in s.notifications] == ["Missing Mood"]


@pytest.mark.asyncio
async def test_request_is_built_from_selections(session):
    session.set_preferences("prefers quiet places")
    session.set_provider(AIProvider.LOCAL)
    fetcher = AsyncMock(return_value=SuggestionResponse(suggestions=[]))

    await find_activities(session, fetcher=fetcher, image_generator=None)

    request = fetcher.await_args.args[0]
    assert request.locationContext == "downtown Metropolis"
    assert request.mood == "Relaxed"
    assert request.timeAvailable == "1 hour"
    assert request.preferences == "prefers quiet places"
    assert request.aiProvider is AIProvider.LOCAL


@pytest.mark.asyncio
async def test_results_state(session, reading_nook):
    fetcher = AsyncMock(return_value=SuggestionResponse(suggestions=[reading_nook]))

    await find_activities(session, fetcher=fetcher, image_generator=None)

    assert session.status is SearchStatus.RESULTS
    assert session.searchId == 1
    assert [a.name for a in session.activities] == ["Quiet Reading Nook"]


@pytest.mark.asyncio
async def test_empty_state_is_distinct(session):
    fetcher = AsyncMock(return_value=SuggestionResponse(suggestions=[]))

    await find_activities(session, fetcher=fetcher, image_generator=None)

    view = session.view()
    assert view["status"] == "empty"
    assert view["message"]["title"] == "No AI suggestions found for these settings."
    assert [n["variant"] for n in view["notifications"]] == ["default"]


@pytest.mark.asyncio
async def test_error_clears_results_and_notifies_once(session, reading_nook):
    await find_activities(
        session,
        fetcher=AsyncMock(return_value=SuggestionResponse(suggestions=[reading_nook])),
        image_generator=None,
    )
    session.drain_notifications()
    session.set_provider(AIProvider.LOCAL)

    await find_activities(
        session,
        fetcher=AsyncMock(side_effect=MalformedOutputError("not json", provider="local")),
        image_generator=None,
    )

    assert session.status is SearchStatus.ERROR
    assert session.activities == []
    destructive = [n for n in session.notifications if n.variant == "destructive"]
    assert len(destructive) == 1
    assert "Local AI (Ollama)" in destructive[0].description


@pytest.mark.asyncio
async def test_transport_error_on_local_provider_carries_hint(session):
    session.set_provider(AIProvider.LOCAL)

    await find_activities(
        session,
        fetcher=AsyncMock(side_effect=TransportError("refused", provider="local")),
        image_generator=None,
    )

    assert "Is the local server running?" in session.errorMessage


@pytest.mark.asyncio
async def test_images_patch_their_own_cards(session, reading_nook):
    items = [dict(reading_nook, name="First"), dict(reading_nook, name="Second", imageKeywords="harbour view")]
    fetcher = AsyncMock(return_value=SuggestionResponse(suggestions=items))

    async def fake_image(keywords):
        return f"data:image/jpeg;base64,{keywords.replace(' ', '-')}"

    tasks = await find_activities(session, fetcher=fetcher, image_generator=fake_image)
    await asyncio.gather(*tasks)

    photos = {a.name: a.photoUrl for a in session.activities}
    assert photos["First"] == "data:image/jpeg;base64,relaxation-first"
    assert photos["Second"] == "data:image/jpeg;base64,harbour-view"


@pytest.mark.asyncio
async def test_failed_image_keeps_placeholder(session, reading_nook):
    fetcher = AsyncMock(return_value=SuggestionResponse(suggestions=[reading_nook]))

    tasks = await find_activities(session, fetcher=fetcher, image_generator=AsyncMock(return_value=None))
    await asyncio.gather(*tasks)

    assert session.activities[0].photoUrl == "https://placehold.co/600x400.png"


@pytest.mark.asyncio
async def test_late_image_from_previous_search_is_dropped(session, reading_nook):
    release = asyncio.Event()

    async def slow_image(keywords):
        await release.wait()
        return "data:image/jpeg;base64,stale"

    fetcher = AsyncMock(return_value=SuggestionResponse(suggestions=[reading_nook]))
    stale_tasks = await find_activities(session, fetcher=fetcher, image_generator=slow_image)

    await find_activities(session, fetcher=fetcher, image_generator=None)
    release.set()
    await asyncio.gather(*stale_tasks)

    assert session.searchId == 2
    assert session.activities[0].photoUrl == "https://placehold.co/600x400.png"


def test_patch_photo_is_keyed_by_identity(session, reading_nook):
    from wandersnap.activities import to_activities
    from wandersnap.schemas import ActivitySuggestion

    search_id = session.begin_search()
    activities = to_activities([ActivitySuggestion(**reading_nook)] * 2)
    session.finish_search(search_id, activities)

    assert session.patch_photo(search_id, activities[1].id, "data:x") is True
    assert session.activities[0].photoUrl != "data:x"
    assert session.patch_photo(search_id, "no-such-id", "data:y") is False
    assert session.patch_photo(search_id + 1, activities[0].id, "data:z") is False


def test_stale_results_do_not_overwrite_newer_search(session, reading_nook):
    first = session.begin_search()
    second = session.begin_search()

    assert session.finish_search(first, []) is False
    assert session.fail_search(first, "old failure") is False
    assert session.status is SearchStatus.LOADING
    assert second == session.searchId


@pytest.mark.asyncio
async def test_detect_location_names_the_area():
    s = SearchSession()

    name = await detect_location(s, 40.0, -74.0, geocoder=AsyncMock(return_value="Metropolis"))

    assert name == "Metropolis"
    assert s.locationDisplayName == "Metropolis"
    assert s.location == UserLocation(lat=40.0, lng=-74.0)
    assert [n.title for n in s.notifications] == ["Coordinates detected!", "Location Identified!"]


@pytest.mark.asyncio
async def test_detect_location_falls_back_to_nearby_area():
    s = SearchSession()

    await detect_location(s, 1.0, 2.0, geocoder=AsyncMock(side_effect=GeocodingError("503", status=503)))

    assert s.locationDisplayName == NEARBY_AREA
    assert s.notifications[-1].variant == "default"
    assert s.notifications[-1].title == "Location Name Info"


@pytest.mark.asyncio
async def test_detect_location_unreachable_geocoder_reports_name_error():
    s = SearchSession()

    await detect_location(s, 1.0, 2.0, geocoder=AsyncMock(side_effect=GeocodingError("connect timeout")))

    assert s.locationDisplayName == NEARBY_AREA
    assert (s.notifications[-1].title, s.notifications[-1].variant) == ("Location Name Error", "default")


def test_store_expires_old_sessions():
    store = SessionStore(timeout=timedelta(minutes=20))
    old = store.create()
    old.createdAt = datetime.utcnow() - timedelta(minutes=21)
    fresh = store.create()

    assert store.get(old.id) is None
    assert store.get(fresh.id) is fresh
    assert len(store) == 1


@pytest.mark.asyncio
async def test_unexpected_fetch_failure_ends_in_error_state(session):
    await find_activities(
        session,
        fetcher=AsyncMock(side_effect=ValueError("Missing key inputs argument!")),
        image_generator=None,
    )

    view = session.view()
    assert view["status"] == "error"
    assert view["canSearch"] is True
    assert view["activities"] == []
    destructive = [n for n in view["notifications"] if n["variant"] == "destructive"]
    assert len(destructive) == 1
    assert destructive[0]["title"] == "AI Suggestion Error"
    assert "Google AI" in destructive[0]["description"]
