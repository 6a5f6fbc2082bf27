"""Tests for the templated itinerary generator."""

from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from itinerary_studio.core.errors import ItineraryValidationError
from itinerary_studio.logic.generator import (
    ARRIVAL_TITLE,
    DAY_ACTIVITIES,
    DEPARTURE_TITLE,
    PLACE_IMAGES,
    count_days,
    generate_itinerary,
)
from itinerary_studio.models.itinerary import ItineraryStatus, TripSettings


def test_paris_trip(paris_settings):
    itinerary = generate_itinerary(paris_settings)

    assert len(itinerary.days) == 3
    assert itinerary.days[0].title == "Arrival & Orientation"
    assert itinerary.days[1].title == "Paris Exploration"
    assert itinerary.days[2].title == "Departure"
    assert itinerary.accommodation.nights == 2
    assert itinerary.status == ItineraryStatus.DRAFT
    assert itinerary.duration == "3 Days / 2 Nights"
    assert itinerary.title == "Paris Cultural & Adventure Experience"
    assert itinerary.comments == []
    assert itinerary.version == 1


@pytest.mark.parametrize("nights", [1, 2, 5, 13])
def test_day_count_and_indices(nights):
    start = date(2024, 9, 20)
    trip = TripSettings(
        destination="Tbilisi",
        start_date=start,
        end_date=start + timedelta(days=nights),
        theme="Family Fun",
    )

    itinerary = generate_itinerary(trip)

    assert len(itinerary.days) == nights
    assert [d.day for d in itinerary.days] == list(range(1, nights + 1))
    assert [d.date for d in itinerary.days] == [start + timedelta(days=i) for i in range(nights)]
    assert itinerary.accommodation.nights == nights - 1
    assert itinerary.inclusions[0] == f"{nights - 1} nights luxury accommodation"
    assert itinerary.days[0].title == ARRIVAL_TITLE
    if nights > 1:
        assert itinerary.days[-1].title == DEPARTURE_TITLE


def test_single_day_trip_is_arrival():
    trip = TripSettings(destination="Rome", start_date=date(2024, 1, 1), end_date=date(2024, 1, 2), theme="Honeymoon")

    itinerary = generate_itinerary(trip)

    assert len(itinerary.days) == 1
    assert itinerary.days[0].title == ARRIVAL_TITLE
    assert itinerary.accommodation.nights == 0


def test_day_content_template(paris_settings):
    days = generate_itinerary(paris_settings).days

    assert all(d.activities == DAY_ACTIVITIES for d in days)
    assert days[0].meals == "Welcome dinner included"
    assert {d.meals for d in days[1:]} == {"Breakfast included"}
    assert all(d.city == "Paris" for d in days)
    assert all(d.accommodation == "Premium Hotel in Paris" for d in days)
    assert days[1].description.startswith("Day 2 offers an immersive experience in Paris")


def test_images_rotate_through_pool(paris_settings):
    days = generate_itinerary(paris_settings).days

    assert days[0].images == [PLACE_IMAGES[0], PLACE_IMAGES[1]]
    assert days[1].images == [PLACE_IMAGES[1], PLACE_IMAGES[2]]
    assert days[2].images == [PLACE_IMAGES[2], PLACE_IMAGES[0]]


def test_flights_and_consultant(paris_settings):
    itinerary = generate_itinerary(paris_settings)

    assert itinerary.flights.departure.startswith("NYC → Paris, 2024-06-01")
    assert itinerary.flights.return_flight.startswith("Paris → NYC, 2024-06-04")
    assert itinerary.consultant.name
    assert itinerary.consultant.email


def test_each_generation_gets_a_new_id(paris_settings):
    assert generate_itinerary(paris_settings).id != generate_itinerary(paris_settings).id


def test_accepts_plain_dict():
    itinerary = generate_itinerary({
        "destination": "Lisbon",
        "start_date": "2024-03-10",
        "end_date": "2024-03-12",
        "theme": "Luxury & Relaxation",
    })

    assert len(itinerary.days) == 2
    assert itinerary.travelers == 2


@pytest.mark.parametrize("overrides", [
    {"end_date": "2024-06-01"},           # same day
    {"end_date": "2024-05-30"},           # before start
    {"destination": ""},
    {"destination": "   "},
    {"theme": ""},
    {"theme": None},
    {"start_date": None},
])
def test_invalid_settings_produce_no_itinerary(overrides):
    data = {
        "destination": "Paris",
        "start_date": "2024-06-01",
        "end_date": "2024-06-04",
        "theme": "Cultural & Adventure",
    }
    data.update(overrides)

    with pytest.raises(ItineraryValidationError):
        generate_itinerary(data)


def test_trip_settings_rejects_reversed_dates():
    with pytest.raises(ValidationError):
        TripSettings(destination="Paris", start_date=date(2024, 6, 4), end_date=date(2024, 6, 1), theme="x")


def test_count_days():
    assert count_days(date(2024, 6, 1), date(2024, 6, 4)) == 3
    assert count_days(date(2024, 2, 28), date(2024, 3, 1)) == 2  # leap year
