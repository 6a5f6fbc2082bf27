from functools import lru_cache
from typing import Optional

from itinerary_studio.core.config import settings
from itinerary_studio.db.inmemory import InMemoryItineraryRepository
from itinerary_studio.db.repository import ItineraryRepository, SupabaseItineraryRepository
from itinerary_studio.db.supabase_client import supabase_client
from itinerary_studio.services.itinerary_service import ItineraryService


def build_repository(backend: Optional[str] = None) -> ItineraryRepository:
    backend = (backend or settings.STORAGE_BACKEND).lower()
    if backend == "memory":
        return InMemoryItineraryRepository()
    if backend == "supabase":
        return SupabaseItineraryRepository(supabase_client())
    raise ValueError(f"Unknown STORAGE_BACKEND '{backend}' (expected 'supabase' or 'memory')")


# One service per process, shared by every request (tests override this dependency)
@lru_cache(maxsize=1)
def get_itinerary_service() -> ItineraryService:
    return ItineraryService(build_repository())
