from pydantic import BaseModel, Field
from typing import List, Optional

from itinerary_studio.models.itinerary import Itinerary, ItineraryStatus

# --- Owner side ---

class CreateItineraryResponse(BaseModel):
    id: str
    redirect_path: str  # e.g. "/edit/<id>"
    itinerary: Itinerary

class ShareResponse(BaseModel):
    share_token: str
    share_url: str
    share_path: str
    status: ItineraryStatus

class ReplyRequest(BaseModel):
    content: str

class DashboardStats(BaseModel):
    total: int
    active: int  # shared + feedback
    awaiting_feedback: int
    approved: int
    completed: int
    pending_comments: int

class ItineraryList(BaseModel):
    items: List[Itinerary]
    count: int

# --- Client side (share link) ---

class CommentCreateRequest(BaseModel):
    section: str = Field(description="general, flights, accommodation, itinerary, inclusions ...")
    content: str
    line_item: Optional[str] = None
    author: str = "Client"
