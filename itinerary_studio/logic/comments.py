# itinerary_studio/logic/comments.py

from collections import Counter
from typing import Dict, Iterable, Optional

from itinerary_studio.core.errors import InvalidTransitionError, ItineraryValidationError
from itinerary_studio.models.itinerary import Comment, CommentStatus, CommentType

CLIENT_AUTHOR = "Client"
CONSULTANT_AUTHOR = "Consultant"
RESPONSE_SECTION = "response"

# Sections a client can attach feedback to from the shared view
COMMENT_SECTIONS = [
    "general",
    "flights",
    "accommodation",
    "itinerary",
    "inclusions",
    "exclusions",
]


def _require_text(value: Optional[str], what: str) -> str:
    if value is None or not value.strip():
        raise ItineraryValidationError(f"{what} must not be empty.")
    return value


def resolve(comment: Comment) -> Comment:
    """
    pending -> resolved, addressed -> resolved. Resolving twice is a no-op.
    """
    if comment.status == CommentStatus.RESOLVED:
        return comment
    return comment.model_copy(update={"status": CommentStatus.RESOLVED})


def address(comment: Comment) -> Comment:
    """
    Marks a comment as answered by the consultant. Resolved comments are closed.
    """
    if comment.status == CommentStatus.RESOLVED:
        raise InvalidTransitionError("Cannot reply to a resolved comment")
    if comment.status == CommentStatus.ADDRESSED:
        return comment
    return comment.model_copy(update={"status": CommentStatus.ADDRESSED})


def build_client_comment(
    section: str,
    content: str,
    line_item: Optional[str] = None,
    author: str = CLIENT_AUTHOR,
) -> Comment:
    section = _require_text(section, "Comment section").strip()
    return Comment(
        section=section,
        line_item=line_item or None,
        content=_require_text(content, "Comment text"),
        author=(author or CLIENT_AUTHOR).strip() or CLIENT_AUTHOR,
        status=CommentStatus.PENDING,
        type=CommentType.FEEDBACK,
    )


def build_reply(content: str) -> Comment:
    return Comment(
        section=RESPONSE_SECTION,
        content=_require_text(content, "Reply text"),
        author=CONSULTANT_AUTHOR,
        status=CommentStatus.ADDRESSED,
        type=CommentType.FEEDBACK,
    )


def summarize(comments: Iterable[Comment]) -> Dict[str, int]:
    counts = Counter(c.status.value for c in comments)
    return {status.value: counts.get(status.value, 0) for status in CommentStatus}
