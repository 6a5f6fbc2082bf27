from datetime import date

import pytest
from fastapi.testclient import TestClient

from itinerary_studio.api.deps import get_itinerary_service
from itinerary_studio.db.inmemory import InMemoryItineraryRepository
from itinerary_studio.main import app
from itinerary_studio.models.itinerary import TripSettings
from itinerary_studio.services.itinerary_service import ItineraryService

PUBLIC_BASE_URL = "https://studio.test"


@pytest.fixture
def repository():
    return InMemoryItineraryRepository()


@pytest.fixture
def service(repository):
    # No network in tests: every image counts as unreachable
    return ItineraryService(repository, public_base_url=PUBLIC_BASE_URL, image_fetcher=lambda url: None)


@pytest.fixture
def client(service):
    app.dependency_overrides[get_itinerary_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def paris_settings():
    return TripSettings(
        destination="Paris",
        start_date=date(2024, 6, 1),
        end_date=date(2024, 6, 4),
        travelers=2,
        budget="$3000",
        theme="Cultural & Adventure",
    )


@pytest.fixture
def draft_itinerary(service, paris_settings):
    return service.create_itinerary(paris_settings)


@pytest.fixture
def shared_itinerary(service, draft_itinerary):
    service.share_itinerary(draft_itinerary.id)
    return service.get_itinerary(draft_itinerary.id)
