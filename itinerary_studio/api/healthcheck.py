from fastapi import APIRouter

from itinerary_studio.core.config import settings

router = APIRouter()

@router.get("/health")
def healthcheck():
    return {"status": "ok", "message": "Itinerary Studio backend running", "storage": settings.STORAGE_BACKEND}
