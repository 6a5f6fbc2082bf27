import math
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ItineraryStatus(str, Enum):
    DRAFT = "draft"
    SHARED = "shared"
    FEEDBACK = "feedback"
    APPROVED = "approved"
    COMPLETED = "completed"


class CommentStatus(str, Enum):
    PENDING = "pending"
    ADDRESSED = "addressed"
    RESOLVED = "resolved"


class CommentType(str, Enum):
    FEEDBACK = "feedback"
    CHANGE_REQUEST = "change_request"
    APPROVAL = "approval"


# --- Trip details ---

class FlightDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    departure: str = ""
    return_flight: str = Field(default="", alias="return")


class AccommodationDetails(BaseModel):
    hotel: str = ""
    nights: int = Field(default=0, ge=0)
    rating: str = ""


class ConsultantInfo(BaseModel):
    name: str = ""
    email: Optional[str] = None  # free-text contact, not validated as an address
    phone: str = ""
    company: str = ""
    logo: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, value):
        # The itineraries table stores a missing address as NULL or ""
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ItineraryDay(BaseModel):
    day: int = Field(ge=1)
    date: date
    title: str
    city: str
    activities: List[str] = []
    meals: str = ""
    accommodation: str = ""
    images: List[str] = []
    description: Optional[str] = None


class Comment(BaseModel):
    id: Optional[str] = None  # assigned by the repository on insert
    section: str
    line_item: Optional[str] = None
    content: str
    author: str
    timestamp: datetime = Field(default_factory=utcnow)
    status: CommentStatus = CommentStatus.PENDING
    type: CommentType = CommentType.FEEDBACK


def count_days(start: date, end: date) -> int:
    """Whole days between the two dates, rounded up."""
    return math.ceil((end - start) / timedelta(days=1))


def check_day_sequence(days: List[ItineraryDay]) -> List[ItineraryDay]:
    """
    Returns the days ordered by index; raises if the indices are not 1..N.
    """
    ordered = sorted(days, key=lambda d: d.day)
    for expected, day in enumerate(ordered, start=1):
        if day.day != expected:
            raise ValueError(f"Day numbers must run 1..{len(ordered)} without gaps; got day {day.day} at position {expected}")
    return ordered


# --- The aggregate ---

class Itinerary(BaseModel):
    id: Optional[str] = None
    title: str
    destination: str
    start_date: date
    end_date: date
    duration: str
    travelers: int = Field(ge=1)
    budget: str = ""
    theme: str
    status: ItineraryStatus = ItineraryStatus.DRAFT
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    version: int = Field(default=1, ge=1)
    share_token: Optional[str] = None

    flights: FlightDetails = Field(default_factory=FlightDetails)
    accommodation: AccommodationDetails = Field(default_factory=AccommodationDetails)
    days: List[ItineraryDay] = []
    inclusions: List[str] = []
    exclusions: List[str] = []
    consultant: ConsultantInfo = Field(default_factory=ConsultantInfo)
    comments: List[Comment] = []

    @field_validator("days")
    @classmethod
    def days_are_contiguous(cls, days: List[ItineraryDay]) -> List[ItineraryDay]:
        return check_day_sequence(days)

    @model_validator(mode="after")
    def days_match_dates(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        expected = count_days(self.start_date, self.end_date)
        if self.days and len(self.days) != expected:
            raise ValueError(
                f"{self.start_date} to {self.end_date} spans {expected} days but the itinerary has {len(self.days)}"
            )
        return self

    def find_comment(self, comment_id: str) -> Optional[Comment]:
        return next((c for c in self.comments if c.id == comment_id), None)

    def merged_with(self, update: "ItineraryUpdate") -> "Itinerary":
        """
        The itinerary as it would look after `update`, fully re-validated.
        Raises pydantic.ValidationError if the result breaks an invariant.
        """
        changes = {
            key: value
            for key, value in update.model_dump(exclude_unset=True, exclude={"expected_version"}).items()
            if value is not None
        }
        return Itinerary.model_validate({**self.model_dump(), **changes})


# --- Inputs ---

class TripSettings(BaseModel):
    """
    Generation input collected by the create form. Consumed once, never stored.
    """
    destination: str
    cities: List[str] = []
    start_date: date
    end_date: date
    travelers: int = Field(default=2, ge=1)
    budget: str = ""
    theme: str
    attractions: Optional[List[str]] = None
    special_requests: Optional[str] = None

    @field_validator("destination", "theme")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("cities")
    @classmethod
    def drop_blank_cities(cls, cities: List[str]) -> List[str]:
        return [c.strip() for c in cities if c and c.strip()]

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class ItineraryUpdate(BaseModel):
    """
    Partial update from the edit view. Only fields explicitly sent are applied.
    Status and comments are not editable here.
    """
    title: Optional[str] = None
    destination: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    duration: Optional[str] = None
    travelers: Optional[int] = Field(default=None, ge=1)
    budget: Optional[str] = None
    theme: Optional[str] = None
    flights: Optional[FlightDetails] = None
    accommodation: Optional[AccommodationDetails] = None
    days: Optional[List[ItineraryDay]] = None
    inclusions: Optional[List[str]] = None
    exclusions: Optional[List[str]] = None
    consultant: Optional[ConsultantInfo] = None

    expected_version: Optional[int] = None

    @field_validator("days")
    @classmethod
    def days_are_contiguous(cls, days):
        if days is None:
            return days
        return check_day_sequence(days)
