# itinerary_studio/logic/generator.py
import logging
import uuid
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from itinerary_studio.core.config import settings as app_settings
from itinerary_studio.core.errors import ItineraryValidationError
from itinerary_studio.models.itinerary import (
    AccommodationDetails,
    ConsultantInfo,
    FlightDetails,
    Itinerary,
    ItineraryDay,
    ItineraryStatus,
    TripSettings,
    count_days,
    utcnow,
)

logger = logging.getLogger(__name__)

PLACE_IMAGES = [
    "https://images.unsplash.com/photo-1506905925346-21bda4d32df4?w=800&h=400&fit=crop",
    "https://images.unsplash.com/photo-1564507592333-c60657eea523?w=800&h=400&fit=crop",
    "https://images.unsplash.com/photo-1520637836862-4d197d17c36a?w=800&h=400&fit=crop",
]
IMAGES_PER_DAY = 2

DAY_ACTIVITIES = [
    "Morning city tour and local markets",
    "Visit iconic landmarks and attractions",
    "Traditional cultural experience",
    "Evening leisure time and local cuisine",
]

ARRIVAL_TITLE = "Arrival & Orientation"
DEPARTURE_TITLE = "Departure"

HOME_AIRPORT = "NYC"
AIRLINE_LABEL = "AI Selected Premium Airline"

EXCLUSIONS = [
    "International flights",
    "Travel insurance",
    "Personal expenses and souvenirs",
    "Lunches and dinners not mentioned",
    "Optional activities and excursions",
    "Spa treatments and wellness services",
    "Alcoholic beverages",
]


def duration_label(day_count: int) -> str:
    return f"{day_count} Days / {day_count - 1} Nights"


def _day_title(index: int, day_count: int, destination: str) -> str:
    if index == 1:
        return ARRIVAL_TITLE
    if index == day_count:
        return DEPARTURE_TITLE
    return f"{destination} Exploration"


def _day_images(index: int) -> List[str]:
    # each day starts one image further into the pool
    return [PLACE_IMAGES[(index - 1 + k) % len(PLACE_IMAGES)] for k in range(IMAGES_PER_DAY)]


def build_days(trip: TripSettings, day_count: int) -> List[ItineraryDay]:
    day_plans: List[ItineraryDay] = []

    for index in range(1, day_count + 1):
        day_plans.append(
            ItineraryDay(
                day=index,
                date=trip.start_date + timedelta(days=index - 1),
                title=_day_title(index, day_count, trip.destination),
                city=trip.destination,
                activities=list(DAY_ACTIVITIES),
                meals="Welcome dinner included" if index == 1 else "Breakfast included",
                accommodation=f"Premium Hotel in {trip.destination}",
                images=_day_images(index),
                description=(
                    f"Day {index} offers an immersive experience in {trip.destination} "
                    f"with carefully curated activities."
                ),
            )
        )

    return day_plans


def _inclusions(nights: int) -> List[str]:
    return [
        f"{nights} nights luxury accommodation",
        "Daily gourmet breakfast",
        "Professional English-speaking guide",
        "All transportation in premium vehicles",
        "Entrance fees to all mentioned attractions",
        "Cultural experiences and activities",
        "Welcome dinner on arrival",
        "24/7 concierge service",
    ]


def default_consultant() -> ConsultantInfo:
    return ConsultantInfo(
        name=app_settings.CONSULTANT_NAME,
        email=app_settings.CONSULTANT_EMAIL,
        phone=app_settings.CONSULTANT_PHONE,
        company=app_settings.CONSULTANT_COMPANY,
        logo=app_settings.CONSULTANT_LOGO,
    )


def _coerce_settings(trip: Union[TripSettings, Dict]) -> TripSettings:
    if isinstance(trip, TripSettings):
        # Re-run validation in case the instance was built with model_construct
        data = trip.model_dump()
    else:
        data = trip
    try:
        return TripSettings.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "settings" for err in e.errors())
        raise ItineraryValidationError(f"Please fill in all required fields ({fields}).") from e


def generate_itinerary(trip: Union[TripSettings, Dict], now: Optional[datetime] = None) -> Itinerary:
    """
    Builds a complete draft itinerary from the trip settings.

    The content is templated: fixed activities, a rotating slice of a static
    image pool and fixed inclusion/exclusion lists. Nothing is persisted here.
    """
    trip = _coerce_settings(trip)
    now = now or utcnow()

    day_count = count_days(trip.start_date, trip.end_date)
    nights = day_count - 1
    days = build_days(trip, day_count)

    logger.info(
        "Generated %d-day itinerary for destination='%s' theme='%s'",
        day_count, trip.destination, trip.theme,
    )

    return Itinerary(
        id=str(uuid.uuid4()),
        title=f"{trip.destination} {trip.theme} Experience",
        destination=trip.destination,
        start_date=trip.start_date,
        end_date=trip.end_date,
        duration=duration_label(day_count),
        travelers=trip.travelers,
        budget=trip.budget,
        theme=trip.theme,
        status=ItineraryStatus.DRAFT,
        created_at=now,
        updated_at=now,
        version=1,
        flights=FlightDetails(
            departure=f"{HOME_AIRPORT} → {trip.destination}, {trip.start_date.isoformat()} ({AIRLINE_LABEL})",
            return_flight=f"{trip.destination} → {HOME_AIRPORT}, {trip.end_date.isoformat()} ({AIRLINE_LABEL})",
        ),
        accommodation=AccommodationDetails(
            hotel=f"Luxury Resort & Spa {trip.destination}",
            nights=nights,
            rating="5-star luxury resort with spa facilities",
        ),
        days=days,
        inclusions=_inclusions(nights),
        exclusions=list(EXCLUSIONS),
        consultant=default_consultant(),
        comments=[],
    )
