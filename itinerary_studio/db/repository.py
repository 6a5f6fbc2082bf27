# File: itinerary_studio/db/repository.py

import logging
import secrets
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from supabase import Client

from itinerary_studio.core.errors import ConflictError, ItineraryError, ItineraryNotFoundError, PersistenceError
from itinerary_studio.db.mappers import (
    COMMENTS_TABLE,
    DAYS_TABLE,
    ITINERARIES_TABLE,
    comment_to_row,
    day_to_row,
    itinerary_to_row,
    row_to_comment,
    row_to_itinerary,
)
from itinerary_studio.models.itinerary import Comment, CommentStatus, Itinerary, ItineraryDay, utcnow

logger = logging.getLogger(__name__)


def new_share_token() -> str:
    return secrets.token_urlsafe(16)


class ItineraryRepository(ABC):
    """
    Storage contract for itineraries with their days and comments.

    Every method either completes or raises; PersistenceError wraps backend
    failures, ItineraryNotFoundError and ConflictError report the two
    expected outcomes of a write against a missing or moved-on row.
    """

    @abstractmethod
    def insert_itinerary(self, itinerary: Itinerary) -> Itinerary:
        """Stores the itinerary and its days; returns it with the stored id and share token."""

    @abstractmethod
    def list_itineraries(self) -> List[Itinerary]:
        """All itineraries, newest first."""

    @abstractmethod
    def get_itinerary(self, itinerary_id: str) -> Optional[Itinerary]:
        ...

    @abstractmethod
    def get_by_share_token(self, share_token: str) -> Optional[Itinerary]:
        ...

    @abstractmethod
    def update_itinerary(
        self,
        itinerary_id: str,
        fields: Dict[str, Any],
        expected_version: Optional[int] = None,
        days: Optional[List[ItineraryDay]] = None,
    ) -> Itinerary:
        """
        Applies column changes, increments the version and refreshes updated_at.
        `days`, when given, replaces the whole day list as part of the same write.
        Raises ConflictError if expected_version is given and does not match.
        """

    @abstractmethod
    def insert_comments(self, itinerary_id: str, comments: List[Comment]) -> List[Comment]:
        ...

    @abstractmethod
    def update_comment_status(self, comment_id: str, status: CommentStatus) -> None:
        ...

    @abstractmethod
    def delete_itinerary(self, itinerary_id: str) -> None:
        """Deletes the itinerary together with its days and comments."""


class SupabaseItineraryRepository(ItineraryRepository):
    """
    Itineraries stored in three Supabase tables: itineraries, itinerary_days
    and itinerary_comments. Days and comments reference itineraries with
    ON DELETE CASCADE.
    """

    def __init__(self, client: Client):
        self.db = client

    def _execute(self, query, action: str):
        try:
            return query.execute()
        except Exception as e:
            logger.error("Supabase error while trying to %s: %s", action, e)
            raise PersistenceError(f"Failed to {action}.") from e

    # --- reads ---

    def _hydrate(self, rows: List[Dict[str, Any]]) -> List[Itinerary]:
        if not rows:
            return []
        ids = [row["id"] for row in rows]

        days = self._execute(
            self.db.table(DAYS_TABLE).select("*").in_("itinerary_id", ids).order("day"),
            "load itinerary days",
        ).data or []
        comments = self._execute(
            self.db.table(COMMENTS_TABLE).select("*").in_("itinerary_id", ids).order("created_at"),
            "load itinerary comments",
        ).data or []

        days_by_itinerary = defaultdict(list)
        for day in days:
            days_by_itinerary[day["itinerary_id"]].append(day)
        comments_by_itinerary = defaultdict(list)
        for comment in comments:
            comments_by_itinerary[comment["itinerary_id"]].append(comment)

        itineraries = []
        for row in rows:
            try:
                itineraries.append(
                    row_to_itinerary(row, days_by_itinerary[row["id"]], comments_by_itinerary[row["id"]])
                )
            except ValidationError as e:
                logger.error("Stored itinerary %s does not map to a valid itinerary: %s", row.get("id"), e)
                raise PersistenceError("Failed to load itinerary.") from e
        return itineraries

    def _get_one(self, column: str, value: str) -> Optional[Itinerary]:
        response = self._execute(
            self.db.table(ITINERARIES_TABLE).select("*").eq(column, value).limit(1),
            "load itinerary",
        )
        found = self._hydrate(response.data or [])
        return found[0] if found else None

    def list_itineraries(self) -> List[Itinerary]:
        response = self._execute(
            self.db.table(ITINERARIES_TABLE).select("*").order("created_at", desc=True),
            "load itineraries",
        )
        return self._hydrate(response.data or [])

    def get_itinerary(self, itinerary_id: str) -> Optional[Itinerary]:
        return self._get_one("id", itinerary_id)

    def get_by_share_token(self, share_token: str) -> Optional[Itinerary]:
        return self._get_one("share_token", share_token)

    # --- writes ---

    def insert_itinerary(self, itinerary: Itinerary) -> Itinerary:
        row = itinerary_to_row(itinerary)
        row["share_token"] = itinerary.share_token or new_share_token()

        response = self._execute(
            self.db.table(ITINERARIES_TABLE).insert(row),
            "save itinerary",
        )
        if not response.data:
            raise PersistenceError("Failed to save itinerary.")
        saved = response.data[0]
        new_id = str(saved["id"])

        if itinerary.days:
            try:
                self._execute(
                    self.db.table(DAYS_TABLE).insert([day_to_row(new_id, d) for d in itinerary.days]),
                    "save itinerary days",
                )
            except PersistenceError:
                # No transactions over the REST API: remove the orphaned itinerary row
                logger.warning("Removing itinerary %s after its days failed to save", new_id)
                self._execute(self.db.table(ITINERARIES_TABLE).delete().eq("id", new_id), "clean up itinerary")
                raise

        return itinerary.model_copy(update={
            "id": new_id,
            "share_token": saved.get("share_token") or row["share_token"],
            "created_at": saved.get("created_at") or itinerary.created_at,
            "updated_at": saved.get("updated_at") or itinerary.updated_at,
            "version": saved.get("version") or itinerary.version,
            "comments": [],
        })

    def update_itinerary(
        self,
        itinerary_id: str,
        fields: Dict[str, Any],
        expected_version: Optional[int] = None,
        days: Optional[List[ItineraryDay]] = None,
    ) -> Itinerary:
        current = self._execute(
            self.db.table(ITINERARIES_TABLE).select("id, version").eq("id", itinerary_id).limit(1),
            "load itinerary",
        ).data
        if not current:
            raise ItineraryNotFoundError()
        version = current[0]["version"]
        if expected_version is not None and expected_version != version:
            raise ConflictError(f"Itinerary was modified (version {version}, expected {expected_version}). Reload and try again.")

        payload = dict(fields)
        payload["version"] = version + 1
        payload["updated_at"] = utcnow().isoformat()

        # Days go first so the row never points at a date range its days do not match
        previous_days = self._replace_days(itinerary_id, days) if days is not None else None
        try:
            # Compare-and-set on version so a concurrent writer cannot be overwritten silently
            response = self._execute(
                self.db.table(ITINERARIES_TABLE).update(payload).eq("id", itinerary_id).eq("version", version),
                "update itinerary",
            )
            if not response.data:
                raise ConflictError("Itinerary was modified by someone else. Reload and try again.")
        except ItineraryError:
            if previous_days is not None:
                self._restore_days(itinerary_id, previous_days)
            raise

        updated = self.get_itinerary(itinerary_id)
        if updated is None:
            raise ItineraryNotFoundError()
        return updated

    def _replace_days(self, itinerary_id: str, days: List[ItineraryDay]) -> List[Dict[str, Any]]:
        """Swaps in the new day rows and returns the previous ones."""
        previous = self._execute(
            self.db.table(DAYS_TABLE).select("*").eq("itinerary_id", itinerary_id).order("day"),
            "load itinerary days",
        ).data or []

        self._execute(self.db.table(DAYS_TABLE).delete().eq("itinerary_id", itinerary_id), "update itinerary days")
        if not days:
            return previous
        try:
            self._execute(
                self.db.table(DAYS_TABLE).insert([day_to_row(itinerary_id, d) for d in days]),
                "update itinerary days",
            )
        except PersistenceError:
            self._restore_days(itinerary_id, previous)
            raise
        return previous

    def _restore_days(self, itinerary_id: str, previous: List[Dict[str, Any]]) -> None:
        logger.warning("Restoring %d previous days of itinerary %s", len(previous), itinerary_id)
        self._execute(self.db.table(DAYS_TABLE).delete().eq("itinerary_id", itinerary_id), "restore itinerary days")
        if previous:
            self._execute(self.db.table(DAYS_TABLE).insert(previous), "restore itinerary days")

    def insert_comments(self, itinerary_id: str, comments: List[Comment]) -> List[Comment]:
        if not comments:
            return []
        response = self._execute(
            self.db.table(COMMENTS_TABLE).insert([comment_to_row(itinerary_id, c) for c in comments]),
            "save comment",
        )
        return [row_to_comment(row) for row in response.data or []]

    def update_comment_status(self, comment_id: str, status: CommentStatus) -> None:
        response = self._execute(
            self.db.table(COMMENTS_TABLE).update({"status": CommentStatus(status).value}).eq("id", comment_id),
            "update comment",
        )
        if not response.data:
            raise ItineraryNotFoundError("Comment not found")

    def delete_itinerary(self, itinerary_id: str) -> None:
        response = self._execute(
            self.db.table(ITINERARIES_TABLE).delete().eq("id", itinerary_id),
            "delete itinerary",
        )
        if not response.data:
            raise ItineraryNotFoundError()
