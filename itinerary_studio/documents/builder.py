"""
Structured content of an itinerary document.

The builder decides *what* a preview or PDF shows; the renderers in this
package decide how it looks. Building is a pure function of the itinerary
snapshot and is redone for every export.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel

from itinerary_studio.models.itinerary import Itinerary, ItineraryDay

TO_BE_CONFIRMED = "To be confirmed"


class DocumentField(BaseModel):
    label: str
    value: str


class DocumentSection(BaseModel):
    key: str
    heading: str
    subheading: Optional[str] = None
    fields: List[DocumentField] = []
    items: List[str] = []
    images: List[str] = []
    body: Optional[str] = None


class ItineraryDocument(BaseModel):
    title: str
    subtitle: str
    overview: str
    status: str
    footer: str
    sections: List[DocumentSection]

    def section(self, key: str) -> Optional[DocumentSection]:
        return next((s for s in self.sections if s.key == key), None)


def format_date(value: date) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def _field(label: str, value) -> DocumentField:
    text = "" if value is None else str(value).strip()
    return DocumentField(label=label, value=text or TO_BE_CONFIRMED)


def _non_blank(values: List[str]) -> List[str]:
    # the editor appends empty rows before the consultant types into them
    return [v.strip() for v in values if v and v.strip()]


def _overview_text(itinerary: Itinerary) -> str:
    destination = itinerary.destination
    return (
        f"Explore the best of {destination} with this {itinerary.duration.lower()}. "
        f"From vibrant cities to stunning landscapes, experience {destination}'s rich culture "
        f"and historical landmarks. Enjoy a blend of city life and natural wonders."
    )


def _day_section(day: ItineraryDay) -> DocumentSection:
    return DocumentSection(
        key=f"day-{day.day}",
        heading=f"Day {day.day}: {day.title}",
        subheading=f"{format_date(day.date)} · {day.city}",
        fields=[_field("Meals", day.meals), _field("Accommodation", day.accommodation)],
        items=_non_blank(day.activities),
        images=_non_blank(day.images),
        body=day.description or None,
    )


def build_document(itinerary: Itinerary) -> ItineraryDocument:
    sections = [
        DocumentSection(
            key="overview",
            heading="Trip Overview",
            fields=[
                _field("Destination", itinerary.destination),
                _field("Dates", f"{format_date(itinerary.start_date)} – {format_date(itinerary.end_date)}"),
                _field("Duration", itinerary.duration),
                _field("Travelers", itinerary.travelers),
                _field("Budget", itinerary.budget),
                _field("Theme", itinerary.theme),
            ],
        ),
        DocumentSection(
            key="flights",
            heading="Flights",
            fields=[
                _field("Departure", itinerary.flights.departure),
                _field("Return", itinerary.flights.return_flight),
            ],
        ),
        DocumentSection(
            key="accommodation",
            heading="Accommodation",
            fields=[
                _field("Hotel", itinerary.accommodation.hotel),
                _field("Nights", itinerary.accommodation.nights),
                _field("Rating", itinerary.accommodation.rating),
            ],
        ),
    ]
    sections.extend(_day_section(day) for day in itinerary.days)
    sections.append(DocumentSection(key="inclusions", heading="What's Included", items=_non_blank(itinerary.inclusions)))
    sections.append(DocumentSection(key="exclusions", heading="What's Not Included", items=_non_blank(itinerary.exclusions)))

    consultant = itinerary.consultant
    sections.append(
        DocumentSection(
            key="consultant",
            heading="Your Travel Consultant",
            fields=[
                _field("Name", consultant.name),
                _field("Email", consultant.email),
                _field("Phone", consultant.phone),
                _field("Company", consultant.company),
            ],
            images=[consultant.logo] if consultant.logo else [],
        )
    )

    company = consultant.company or "Your travel consultant"
    return ItineraryDocument(
        title=itinerary.title,
        subtitle=f"{itinerary.destination}'s Best Escape",
        overview=_overview_text(itinerary),
        status=itinerary.status.value,
        footer=f"{company} · Last updated {format_date(itinerary.updated_at.date())} · Version {itinerary.version}",
        sections=sections,
    )
