from fastapi import APIRouter
from itinerary_studio.api.v1.endpoints import itineraries, shared

api_router = APIRouter()
api_router.include_router(itineraries.router, prefix="/itineraries", tags=["Itineraries"])
api_router.include_router(shared.router, prefix="/shared", tags=["Shared Itineraries"])
