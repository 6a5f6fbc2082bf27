import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    SUPABASE_URL: str = os.getenv("SUPABASE_URL")
    SUPABASE_KEY: str = os.getenv("SUPABASE_KEY")

    # "supabase" or "memory"
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "supabase")

    # Share links are built as f"{PUBLIC_BASE_URL}/itinerary/{token}"
    PUBLIC_BASE_URL: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:8080").rstrip("/")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # PDF export
    PDF_EMBED_IMAGES: bool = _env_bool("PDF_EMBED_IMAGES", True)
    IMAGE_FETCH_TIMEOUT: float = float(os.getenv("IMAGE_FETCH_TIMEOUT", "10"))

    # Consultant block stamped on every generated itinerary
    CONSULTANT_NAME: str = os.getenv("CONSULTANT_NAME", "Sarah Mitchell")
    CONSULTANT_EMAIL: str = os.getenv("CONSULTANT_EMAIL", "sarah@travelbuilder.com")
    CONSULTANT_PHONE: str = os.getenv("CONSULTANT_PHONE", "+1 (555) 123-4567")
    CONSULTANT_COMPANY: str = os.getenv("CONSULTANT_COMPANY", "TravelBuilder Pro")
    CONSULTANT_LOGO: str = os.getenv(
        "CONSULTANT_LOGO",
        "https://images.unsplash.com/photo-1560250097-0b93528c311a?w=200&h=200&fit=crop",
    )


settings = Settings()
