# File: itinerary_studio/services/itinerary_service.py

import logging
from contextlib import contextmanager
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from itinerary_studio.core.config import settings
from itinerary_studio.core.errors import (
    ItineraryError,
    ItineraryNotFoundError,
    ItineraryValidationError,
    PersistenceError,
)
from itinerary_studio.db.mappers import update_to_row
from itinerary_studio.db.repository import ItineraryRepository, new_share_token
from itinerary_studio.documents.builder import build_document
from itinerary_studio.documents.pdf import render_pdf
from itinerary_studio.documents.preview import render_preview
from itinerary_studio.logic import comments as comment_rules
from itinerary_studio.logic.generator import generate_itinerary
from itinerary_studio.logic.status import StatusEvent, transition
from itinerary_studio.models.itinerary import (
    CommentStatus,
    Itinerary,
    ItineraryStatus,
    ItineraryUpdate,
    TripSettings,
)
from itinerary_studio.models.schemas import DashboardStats, ShareResponse
from itinerary_studio.services.notifications import Notifier
from itinerary_studio.services.store import ItineraryStore

logger = logging.getLogger(__name__)


def _describe(error: ValidationError) -> str:
    return "; ".join(err["msg"].removeprefix("Value error, ") for err in error.errors())


def edit_path(itinerary_id: str) -> str:
    return f"/edit/{itinerary_id}"


def share_path(share_token: str) -> str:
    return f"/itinerary/{share_token}"


def filter_itineraries(
    itineraries: List[Itinerary],
    search: Optional[str] = None,
    status: Optional[Union[ItineraryStatus, str]] = None,
) -> List[Itinerary]:
    """
    Dashboard filter: case-insensitive match on title or destination, plus an
    optional status ("all" or None means any status).
    """
    term = (search or "").strip().lower()
    wanted = None
    if status not in (None, "", "all"):
        try:
            wanted = ItineraryStatus(status)
        except ValueError:
            raise ItineraryValidationError(f"Unknown status filter '{status}'") from None

    result = []
    for itinerary in itineraries:
        if term and term not in itinerary.title.lower() and term not in itinerary.destination.lower():
            continue
        if wanted is not None and itinerary.status != wanted:
            continue
        result.append(itinerary)
    return result


def compute_stats(itineraries: List[Itinerary]) -> DashboardStats:
    def count(*statuses: ItineraryStatus) -> int:
        return sum(1 for i in itineraries if i.status in statuses)

    return DashboardStats(
        total=len(itineraries),
        active=count(ItineraryStatus.SHARED, ItineraryStatus.FEEDBACK),
        awaiting_feedback=count(ItineraryStatus.FEEDBACK),
        approved=count(ItineraryStatus.APPROVED),
        completed=count(ItineraryStatus.COMPLETED),
        pending_comments=sum(
            comment_rules.summarize(i.comments)[CommentStatus.PENDING.value] for i in itineraries
        ),
    )


class ItineraryService:
    """
    Itinerary lifecycle: generation, edits, sharing, client feedback and
    exports. Writes go to the repository first; the store only sees state
    that was persisted.
    """

    def __init__(
        self,
        repository: ItineraryRepository,
        store: Optional[ItineraryStore] = None,
        notifier: Optional[Notifier] = None,
        public_base_url: Optional[str] = None,
        image_fetcher=None,
    ):
        self.repository = repository
        self.store = store or ItineraryStore()
        self.notifier = notifier or Notifier()
        self.public_base_url = (public_base_url or settings.PUBLIC_BASE_URL).rstrip("/")
        self.image_fetcher = image_fetcher

    @contextmanager
    def _reporting(self, failure: str):
        """Reports a failed action once and lets the error propagate."""
        try:
            yield
        except PersistenceError as e:
            logger.error("%s: %s", failure, e.__cause__ or e)
            self.notifier.error("Error", failure)
            raise
        except ItineraryError as e:
            self.notifier.error("Error", e.detail)
            raise

    def _save(self, itinerary: Itinerary) -> Itinerary:
        self.store.put(itinerary)
        current = self.store.current
        if current is not None and current.id == itinerary.id:
            self.store.set_current(itinerary)
        return itinerary

    # --- loading ---

    def load_itineraries(self) -> List[Itinerary]:
        with self._reporting("Failed to load itineraries"):
            itineraries = self.repository.list_itineraries()
        self.store.replace_all(itineraries)
        return itineraries

    def list_itineraries(self, search: Optional[str] = None, status: Optional[str] = None) -> List[Itinerary]:
        return filter_itineraries(self.load_itineraries(), search, status)

    def dashboard_stats(self) -> DashboardStats:
        return compute_stats(self.load_itineraries())

    def _load(self, itinerary_id: str) -> Itinerary:
        itinerary = self.repository.get_itinerary(itinerary_id)
        if itinerary is None:
            raise ItineraryNotFoundError()
        return itinerary

    def get_itinerary(self, itinerary_id: str) -> Itinerary:
        with self._reporting("Failed to load itinerary"):
            return self._load(itinerary_id)

    def select_itinerary(self, itinerary_id: Optional[str]) -> Optional[Itinerary]:
        itinerary = self.get_itinerary(itinerary_id) if itinerary_id else None
        self.store.set_current(itinerary)
        return itinerary

    def get_by_share_token(self, share_token: str) -> Optional[Itinerary]:
        """
        Resolves a share link. Any miss, including a failed lookup, is None.
        """
        if not share_token:
            return None
        try:
            return self.repository.get_by_share_token(share_token)
        except PersistenceError as e:
            logger.error("Error loading shared itinerary: %s", e.__cause__ or e)
            return None

    def _require_shared(self, share_token: str) -> Itinerary:
        itinerary = self.get_by_share_token(share_token)
        if itinerary is None:
            raise ItineraryNotFoundError()
        return itinerary

    # --- owner actions ---

    def create_itinerary(self, trip: Union[TripSettings, Dict]) -> Itinerary:
        with self._reporting("Failed to save itinerary"):
            itinerary = generate_itinerary(trip)
            saved = self.repository.insert_itinerary(itinerary)

        self.store.put(saved)
        self.store.set_current(saved)
        self.notifier.success("Itinerary created", f"{saved.title} is ready to edit.")
        return saved

    def update_itinerary(self, itinerary_id: str, update: ItineraryUpdate) -> Itinerary:
        """
        Merges the fields set on `update`. Days, when given, replace the whole
        day list. The merged itinerary must still be valid: end after start and,
        when it has days, one day per day of the date range.
        """
        with self._reporting("Failed to update itinerary"):
            current = self._load(itinerary_id)
            try:
                current.merged_with(update)
            except ValidationError as e:
                raise ItineraryValidationError(_describe(e)) from e

            updated = self.repository.update_itinerary(
                itinerary_id,
                update_to_row(update),
                expected_version=update.expected_version,
                days=update.days,
            )

        self.notifier.success("Success", "Itinerary updated successfully")
        return self._save(updated)

    def delete_itinerary(self, itinerary_id: str) -> None:
        with self._reporting("Failed to delete itinerary"):
            self.repository.delete_itinerary(itinerary_id)
        self.store.remove(itinerary_id)
        self.notifier.success("Success", "Itinerary deleted successfully")

    def share_itinerary(self, itinerary_id: str) -> ShareResponse:
        with self._reporting("Failed to share itinerary"):
            itinerary = self._load(itinerary_id)
            next_status = transition(itinerary.status, StatusEvent.SHARE)

            fields = {}
            if next_status != itinerary.status:
                fields["status"] = next_status.value
            if not itinerary.share_token:
                fields["share_token"] = new_share_token()
            if fields:
                itinerary = self.repository.update_itinerary(
                    itinerary_id, fields, expected_version=itinerary.version
                )

        self._save(itinerary)
        path = share_path(itinerary.share_token)
        self.notifier.success("Share link copied!", "The itinerary share link is ready to send.")
        return ShareResponse(
            share_token=itinerary.share_token,
            share_url=f"{self.public_base_url}{path}",
            share_path=path,
            status=itinerary.status,
        )

    def reply_to_comment(self, itinerary_id: str, comment_id: str, content: str) -> Itinerary:
        """
        Marks the comment addressed and appends the consultant's reply as a new
        comment in the "response" section.
        """
        with self._reporting("Failed to send response"):
            # Validate before touching anything
            reply = comment_rules.build_reply(content)

            itinerary = self._load(itinerary_id)
            original = itinerary.find_comment(comment_id)
            if original is None:
                raise ItineraryNotFoundError("Comment not found")
            addressed = comment_rules.address(original)
            next_status = transition(itinerary.status, StatusEvent.COMMENT)

            updated = self.repository.update_itinerary(
                itinerary_id, {"status": next_status.value}, expected_version=itinerary.version
            )
            if addressed.status != original.status:
                self.repository.update_comment_status(comment_id, addressed.status)
            inserted = self.repository.insert_comments(itinerary_id, [reply])

        comments = [addressed if c.id == comment_id else c for c in updated.comments] + inserted
        self.notifier.success("Response sent", "Your response has been sent to the client.")
        return self._save(updated.model_copy(update={"comments": comments}))

    def resolve_comment(self, itinerary_id: str, comment_id: str) -> Itinerary:
        with self._reporting("Failed to resolve comment"):
            itinerary = self._load(itinerary_id)
            original = itinerary.find_comment(comment_id)
            if original is None:
                raise ItineraryNotFoundError("Comment not found")

            resolved = comment_rules.resolve(original)
            if resolved.status == original.status:
                return itinerary

            updated = self.repository.update_itinerary(itinerary_id, {}, expected_version=itinerary.version)
            self.repository.update_comment_status(comment_id, resolved.status)

        comments = [resolved if c.id == comment_id else c for c in updated.comments]
        self.notifier.success("Comment resolved", "The feedback has been marked as resolved.")
        return self._save(updated.model_copy(update={"comments": comments}))

    def complete_itinerary(self, itinerary_id: str) -> Itinerary:
        with self._reporting("Failed to complete itinerary"):
            itinerary = self._load(itinerary_id)
            next_status = transition(itinerary.status, StatusEvent.COMPLETE)
            if next_status == itinerary.status:
                return itinerary
            updated = self.repository.update_itinerary(
                itinerary_id, {"status": next_status.value}, expected_version=itinerary.version
            )

        self.notifier.success("Itinerary completed", f"{updated.title} has been marked as completed.")
        return self._save(updated)

    # --- client actions (share link) ---

    def add_client_comment(
        self,
        share_token: str,
        section: str,
        content: str,
        line_item: Optional[str] = None,
        author: str = comment_rules.CLIENT_AUTHOR,
    ) -> Itinerary:
        with self._reporting("Failed to add comment"):
            comment = comment_rules.build_client_comment(section, content, line_item, author)

            itinerary = self._require_shared(share_token)
            next_status = transition(itinerary.status, StatusEvent.COMMENT)

            updated = self.repository.update_itinerary(
                itinerary.id, {"status": next_status.value}, expected_version=itinerary.version
            )
            inserted = self.repository.insert_comments(itinerary.id, [comment])

        self.notifier.success("Comment added!", "Your feedback has been sent to the travel consultant.")
        return self._save(updated.model_copy(update={"comments": updated.comments + inserted}))

    def approve_itinerary(self, share_token: str) -> Itinerary:
        with self._reporting("Failed to approve itinerary"):
            itinerary = self._require_shared(share_token)
            next_status = transition(itinerary.status, StatusEvent.APPROVE)
            if next_status == itinerary.status:
                return itinerary
            updated = self.repository.update_itinerary(
                itinerary.id, {"status": next_status.value}, expected_version=itinerary.version
            )

        self.notifier.success(
            "Itinerary approved!", "Thank you for your approval. The consultant will be notified."
        )
        return self._save(updated)

    # --- documents ---

    def render_preview(self, itinerary: Itinerary) -> str:
        return render_preview(build_document(itinerary))

    def export_pdf(self, itinerary: Itinerary) -> bytes:
        with self._reporting("Failed to export PDF"):
            pdf = render_pdf(build_document(itinerary), image_fetcher=self.image_fetcher)
        self.notifier.success("PDF exported!", "Your itinerary has been downloaded as a PDF.")
        return pdf

    def preview_by_id(self, itinerary_id: str) -> str:
        return self.render_preview(self.get_itinerary(itinerary_id))
