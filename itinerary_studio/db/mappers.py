"""Conversion between the domain models and the Supabase table rows."""

from typing import Any, Dict, List, Optional

from itinerary_studio.models.itinerary import (
    AccommodationDetails,
    Comment,
    ConsultantInfo,
    FlightDetails,
    Itinerary,
    ItineraryDay,
    ItineraryUpdate,
)

ITINERARIES_TABLE = "itineraries"
DAYS_TABLE = "itinerary_days"
COMMENTS_TABLE = "itinerary_comments"


def _flights_columns(flights: FlightDetails) -> Dict[str, Any]:
    return {
        "departure_flight": flights.departure,
        "return_flight": flights.return_flight,
    }


def _accommodation_columns(accommodation: AccommodationDetails) -> Dict[str, Any]:
    return {
        "hotel_name": accommodation.hotel,
        "hotel_nights": accommodation.nights,
        "hotel_rating": accommodation.rating,
    }


def _consultant_columns(consultant: ConsultantInfo) -> Dict[str, Any]:
    return {
        "consultant_name": consultant.name,
        "consultant_email": consultant.email,
        "consultant_phone": consultant.phone,
        "consultant_company": consultant.company,
        "consultant_logo": consultant.logo,
    }


def itinerary_to_row(itinerary: Itinerary) -> Dict[str, Any]:
    """
    Insert payload for the itineraries table. id, share_token and timestamps
    are left to the database defaults.
    """
    row = {
        "title": itinerary.title,
        "destination": itinerary.destination,
        "start_date": itinerary.start_date.isoformat(),
        "end_date": itinerary.end_date.isoformat(),
        "duration": itinerary.duration,
        "travelers": itinerary.travelers,
        "budget": itinerary.budget,
        "theme": itinerary.theme,
        "status": itinerary.status.value,
        "version": itinerary.version,
        "inclusions": itinerary.inclusions,
        "exclusions": itinerary.exclusions,
    }
    row.update(_flights_columns(itinerary.flights))
    row.update(_accommodation_columns(itinerary.accommodation))
    row.update(_consultant_columns(itinerary.consultant))
    return row


def update_to_row(update: ItineraryUpdate) -> Dict[str, Any]:
    """
    Column changes for the fields explicitly set on a partial update.
    Days are not columns of the itineraries table and are handled separately.
    """
    fields = update.model_dump(exclude_unset=True, exclude={"days", "expected_version"})
    row: Dict[str, Any] = {}

    for key in ("title", "destination", "duration", "travelers", "budget", "theme", "inclusions", "exclusions"):
        if key in fields and fields[key] is not None:
            row[key] = fields[key]
    for key in ("start_date", "end_date"):
        if fields.get(key) is not None:
            row[key] = getattr(update, key).isoformat()

    if update.flights is not None:
        row.update(_flights_columns(update.flights))
    if update.accommodation is not None:
        row.update(_accommodation_columns(update.accommodation))
    if update.consultant is not None:
        row.update(_consultant_columns(update.consultant))
    return row


def day_to_row(itinerary_id: str, day: ItineraryDay) -> Dict[str, Any]:
    return {
        "itinerary_id": itinerary_id,
        "day": day.day,
        "date": day.date.isoformat(),
        "title": day.title,
        "city": day.city,
        "activities": day.activities,
        "meals": day.meals,
        "accommodation": day.accommodation,
        "images": day.images or [],
        "description": day.description,
    }


def comment_to_row(itinerary_id: str, comment: Comment) -> Dict[str, Any]:
    return {
        "itinerary_id": itinerary_id,
        "section": comment.section,
        "line_item": comment.line_item,
        "content": comment.content,
        "author": comment.author,
        "status": comment.status.value,
        "type": comment.type.value,
    }


def row_to_day(row: Dict[str, Any]) -> ItineraryDay:
    return ItineraryDay(
        day=row["day"],
        date=row["date"],
        title=row["title"],
        city=row["city"],
        activities=row.get("activities") or [],
        meals=row.get("meals") or "",
        accommodation=row.get("accommodation") or "",
        images=row.get("images") or [],
        description=row.get("description"),
    )


def row_to_comment(row: Dict[str, Any]) -> Comment:
    return Comment(
        id=str(row["id"]),
        section=row["section"],
        line_item=row.get("line_item"),
        content=row["content"],
        author=row["author"],
        timestamp=row["created_at"],
        status=row.get("status") or "pending",
        type=row.get("type") or "feedback",
    )


def row_to_itinerary(
    row: Dict[str, Any],
    day_rows: Optional[List[Dict[str, Any]]] = None,
    comment_rows: Optional[List[Dict[str, Any]]] = None,
) -> Itinerary:
    return Itinerary(
        id=str(row["id"]),
        title=row["title"],
        destination=row["destination"],
        start_date=row["start_date"],
        end_date=row["end_date"],
        duration=row["duration"],
        travelers=row["travelers"],
        budget=row.get("budget") or "",
        theme=row["theme"],
        status=row["status"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        version=row.get("version") or 1,
        share_token=row.get("share_token"),
        flights=FlightDetails(
            departure=row.get("departure_flight") or "",
            return_flight=row.get("return_flight") or "",
        ),
        accommodation=AccommodationDetails(
            hotel=row.get("hotel_name") or "",
            nights=row.get("hotel_nights") or 0,
            rating=row.get("hotel_rating") or "",
        ),
        days=[row_to_day(d) for d in day_rows or []],
        inclusions=row.get("inclusions") or [],
        exclusions=row.get("exclusions") or [],
        consultant=ConsultantInfo(
            name=row.get("consultant_name") or "",
            email=row.get("consultant_email"),
            phone=row.get("consultant_phone") or "",
            company=row.get("consultant_company") or "",
            logo=row.get("consultant_logo"),
        ),
        comments=[row_to_comment(c) for c in comment_rows or []],
    )
