# File: itinerary_studio/api/v1/endpoints/itineraries.py

import re
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import HTMLResponse

from itinerary_studio.api.deps import get_itinerary_service
from itinerary_studio.models.itinerary import Itinerary, ItineraryUpdate, TripSettings
from itinerary_studio.models.schemas import (
    CreateItineraryResponse,
    DashboardStats,
    ItineraryList,
    ReplyRequest,
    ShareResponse,
)
from itinerary_studio.services.itinerary_service import ItineraryService, edit_path

router = APIRouter()


def pdf_response(content: bytes, title: str) -> Response:
    filename = re.sub(r"[^A-Za-z0-9_-]+", "_", title).strip("_") or "itinerary"
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}.pdf"'},
    )


@router.get("", response_model=ItineraryList)
def list_itineraries(
    search: Optional[str] = None,
    status_filter: Optional[str] = Query(default=None, alias="status", description="draft, shared, feedback, approved, completed or all"),
    service: ItineraryService = Depends(get_itinerary_service),
):
    """
    Dashboard listing, newest first. `search` matches title or destination.
    """
    items = service.list_itineraries(search=search, status=status_filter)
    return ItineraryList(items=items, count=len(items))


@router.get("/stats", response_model=DashboardStats)
def dashboard_stats(service: ItineraryService = Depends(get_itinerary_service)):
    return service.dashboard_stats()


@router.post("", response_model=CreateItineraryResponse, status_code=status.HTTP_201_CREATED)
def create_itinerary(
    request: TripSettings,
    service: ItineraryService = Depends(get_itinerary_service),
):
    """
    Generates a new itinerary from the trip settings and saves it as a draft.
    """
    itinerary = service.create_itinerary(request)
    return CreateItineraryResponse(id=itinerary.id, redirect_path=edit_path(itinerary.id), itinerary=itinerary)


@router.get("/{itinerary_id}", response_model=Itinerary)
def get_itinerary(itinerary_id: str, service: ItineraryService = Depends(get_itinerary_service)):
    return service.select_itinerary(itinerary_id)


@router.patch("/{itinerary_id}", response_model=Itinerary)
def update_itinerary(
    itinerary_id: str,
    request: ItineraryUpdate,
    service: ItineraryService = Depends(get_itinerary_service),
):
    return service.update_itinerary(itinerary_id, request)


@router.delete("/{itinerary_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_itinerary(itinerary_id: str, service: ItineraryService = Depends(get_itinerary_service)):
    service.delete_itinerary(itinerary_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{itinerary_id}/share", response_model=ShareResponse)
def share_itinerary(itinerary_id: str, service: ItineraryService = Depends(get_itinerary_service)):
    return service.share_itinerary(itinerary_id)


@router.post("/{itinerary_id}/comments/{comment_id}/reply", response_model=Itinerary)
def reply_to_comment(
    itinerary_id: str,
    comment_id: str,
    request: ReplyRequest,
    service: ItineraryService = Depends(get_itinerary_service),
):
    return service.reply_to_comment(itinerary_id, comment_id, request.content)


@router.post("/{itinerary_id}/comments/{comment_id}/resolve", response_model=Itinerary)
def resolve_comment(
    itinerary_id: str,
    comment_id: str,
    service: ItineraryService = Depends(get_itinerary_service),
):
    return service.resolve_comment(itinerary_id, comment_id)


@router.post("/{itinerary_id}/complete", response_model=Itinerary)
def complete_itinerary(itinerary_id: str, service: ItineraryService = Depends(get_itinerary_service)):
    return service.complete_itinerary(itinerary_id)


@router.get("/{itinerary_id}/preview", response_class=HTMLResponse)
def preview_itinerary(itinerary_id: str, service: ItineraryService = Depends(get_itinerary_service)):
    return HTMLResponse(service.preview_by_id(itinerary_id))


@router.get("/{itinerary_id}/pdf")
def export_pdf(itinerary_id: str, service: ItineraryService = Depends(get_itinerary_service)):
    itinerary = service.get_itinerary(itinerary_id)
    return pdf_response(service.export_pdf(itinerary), itinerary.title)
