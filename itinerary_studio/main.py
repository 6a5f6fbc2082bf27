import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from itinerary_studio.api import healthcheck
from itinerary_studio.api.v1.api import api_router
from itinerary_studio.core.errors import ItineraryError
from itinerary_studio.core.logging import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Itinerary Studio API",
    description="Itinerary builder for travel consultants: generation, client sharing, feedback and PDF export.",
    version="1.0.0"
)


@app.exception_handler(ItineraryError)
async def itinerary_error_handler(request: Request, exc: ItineraryError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# Include the v1 router
app.include_router(api_router, prefix="/api/v1")
app.include_router(healthcheck.router, tags=["Health"])

@app.get("/", tags=["Health"])
def read_root():
    """
    Root endpoint to check if the API is running.
    """
    return {"status": "ok", "message": "Welcome to the Itinerary Studio API!"}

# To run the app:
# uvicorn itinerary_studio.main:app --reload
