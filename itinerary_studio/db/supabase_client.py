from functools import lru_cache

from supabase import create_client, Client
from itinerary_studio.core.config import settings

def get_supabase_client() -> Client:
    """
    Initializes and returns a Supabase client.
    """
    if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
        raise ValueError("Supabase URL and Key must be set in .env file")

    supabase: Client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    return supabase

# One shared client, created on first use so the in-memory backend never needs credentials
@lru_cache(maxsize=1)
def supabase_client() -> Client:
    return get_supabase_client()
