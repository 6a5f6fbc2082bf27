# File: itinerary_studio/api/v1/endpoints/shared.py
# Client-facing routes, reachable by anyone holding the share token.

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import HTMLResponse

from itinerary_studio.api.deps import get_itinerary_service
from itinerary_studio.api.v1.endpoints.itineraries import pdf_response
from itinerary_studio.logic.comments import COMMENT_SECTIONS
from itinerary_studio.models.itinerary import Itinerary
from itinerary_studio.models.schemas import CommentCreateRequest
from itinerary_studio.services.itinerary_service import ItineraryService

router = APIRouter()


def _load_shared(share_token: str, service: ItineraryService) -> Itinerary:
    itinerary = service.get_by_share_token(share_token)
    if itinerary is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Itinerary not found. The link may be invalid or the itinerary was removed.",
        )
    return itinerary


@router.get("/sections")
def comment_sections():
    return {"sections": COMMENT_SECTIONS}


@router.get("/{share_token}", response_model=Itinerary)
def get_shared_itinerary(share_token: str, service: ItineraryService = Depends(get_itinerary_service)):
    return _load_shared(share_token, service)


@router.get("/{share_token}/preview", response_class=HTMLResponse)
def preview_shared_itinerary(share_token: str, service: ItineraryService = Depends(get_itinerary_service)):
    return HTMLResponse(service.render_preview(_load_shared(share_token, service)))


@router.post("/{share_token}/comments", response_model=Itinerary, status_code=status.HTTP_201_CREATED)
def add_comment(
    share_token: str,
    request: CommentCreateRequest,
    service: ItineraryService = Depends(get_itinerary_service),
):
    """
    Client feedback on a section of the itinerary. Moves it to "feedback".
    """
    return service.add_client_comment(
        share_token,
        section=request.section,
        content=request.content,
        line_item=request.line_item,
        author=request.author,
    )


@router.post("/{share_token}/approve", response_model=Itinerary)
def approve_itinerary(share_token: str, service: ItineraryService = Depends(get_itinerary_service)):
    return service.approve_itinerary(share_token)


@router.get("/{share_token}/pdf")
def export_shared_pdf(share_token: str, service: ItineraryService = Depends(get_itinerary_service)):
    itinerary = _load_shared(share_token, service)
    return pdf_response(service.export_pdf(itinerary), itinerary.title)
