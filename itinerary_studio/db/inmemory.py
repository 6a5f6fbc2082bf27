"""In-memory implementation of the itinerary repository."""

import uuid
from typing import Any, Dict, List, Optional

from itinerary_studio.core.errors import ConflictError, ItineraryNotFoundError
from itinerary_studio.db.repository import ItineraryRepository, new_share_token
from itinerary_studio.models.itinerary import (
    AccommodationDetails,
    Comment,
    CommentStatus,
    ConsultantInfo,
    FlightDetails,
    Itinerary,
    ItineraryDay,
    utcnow,
)

# column name -> (model attribute, nested attribute)
_NESTED_COLUMNS = {
    "departure_flight": ("flights", "departure"),
    "return_flight": ("flights", "return_flight"),
    "hotel_name": ("accommodation", "hotel"),
    "hotel_nights": ("accommodation", "nights"),
    "hotel_rating": ("accommodation", "rating"),
    "consultant_name": ("consultant", "name"),
    "consultant_email": ("consultant", "email"),
    "consultant_phone": ("consultant", "phone"),
    "consultant_company": ("consultant", "company"),
    "consultant_logo": ("consultant", "logo"),
}
_NESTED_TYPES = {
    "flights": FlightDetails,
    "accommodation": AccommodationDetails,
    "consultant": ConsultantInfo,
}


class InMemoryItineraryRepository(ItineraryRepository):
    """Dict-backed repository with the same contract as the Supabase one."""

    def __init__(self) -> None:
        self._itineraries: Dict[str, Itinerary] = {}

    def _copy(self, itinerary: Itinerary) -> Itinerary:
        return itinerary.model_copy(deep=True)

    def _require(self, itinerary_id: str) -> Itinerary:
        itinerary = self._itineraries.get(itinerary_id)
        if itinerary is None:
            raise ItineraryNotFoundError()
        return itinerary

    def insert_itinerary(self, itinerary: Itinerary) -> Itinerary:
        now = utcnow()
        stored = itinerary.model_copy(deep=True, update={
            "id": str(uuid.uuid4()),
            "share_token": itinerary.share_token or new_share_token(),
            "created_at": now,
            "updated_at": now,
            "comments": [],
        })
        self._itineraries[stored.id] = stored
        return self._copy(stored)

    def list_itineraries(self) -> List[Itinerary]:
        # dicts keep insertion order, so newest first is simply reversed
        return [self._copy(i) for i in reversed(list(self._itineraries.values()))]

    def get_itinerary(self, itinerary_id: str) -> Optional[Itinerary]:
        itinerary = self._itineraries.get(itinerary_id)
        return self._copy(itinerary) if itinerary else None

    def get_by_share_token(self, share_token: str) -> Optional[Itinerary]:
        for itinerary in self._itineraries.values():
            if itinerary.share_token == share_token:
                return self._copy(itinerary)
        return None

    def update_itinerary(
        self,
        itinerary_id: str,
        fields: Dict[str, Any],
        expected_version: Optional[int] = None,
        days: Optional[List[ItineraryDay]] = None,
    ) -> Itinerary:
        current = self._require(itinerary_id)
        if expected_version is not None and expected_version != current.version:
            raise ConflictError(
                f"Itinerary was modified (version {current.version}, expected {expected_version}). Reload and try again."
            )

        changes: Dict[str, Any] = {}
        nested: Dict[str, Dict[str, Any]] = {}
        for column, value in fields.items():
            if column in _NESTED_COLUMNS:
                attr, key = _NESTED_COLUMNS[column]
                nested.setdefault(attr, getattr(current, attr).model_dump())[key] = value
            else:
                changes[column] = value
        for attr, data in nested.items():
            changes[attr] = _NESTED_TYPES[attr].model_validate(data)
        if days is not None:
            changes["days"] = [d.model_copy() for d in days]

        changes["version"] = current.version + 1
        changes["updated_at"] = utcnow()

        # Validate through the model so bad column values fail like a database constraint would
        updated = Itinerary.model_validate({**current.model_dump(), **changes})
        self._itineraries[itinerary_id] = updated
        return self._copy(updated)

    def insert_comments(self, itinerary_id: str, comments: List[Comment]) -> List[Comment]:
        current = self._require(itinerary_id)
        inserted = [
            c.model_copy(update={"id": str(uuid.uuid4()), "timestamp": utcnow()})
            for c in comments
        ]
        self._itineraries[itinerary_id] = current.model_copy(update={"comments": current.comments + inserted})
        return [c.model_copy() for c in inserted]

    def update_comment_status(self, comment_id: str, status: CommentStatus) -> None:
        for itinerary_id, itinerary in self._itineraries.items():
            if itinerary.find_comment(comment_id) is None:
                continue
            comments = [
                c.model_copy(update={"status": CommentStatus(status)}) if c.id == comment_id else c
                for c in itinerary.comments
            ]
            self._itineraries[itinerary_id] = itinerary.model_copy(update={"comments": comments})
            return
        raise ItineraryNotFoundError("Comment not found")

    def delete_itinerary(self, itinerary_id: str) -> None:
        self._require(itinerary_id)
        del self._itineraries[itinerary_id]
