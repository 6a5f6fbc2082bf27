"""Domain errors raised by the service layer.

Each error carries the HTTP status the API answers with, so endpoints can stay
free of translation code.
"""


class ItineraryError(Exception):
    status_code: int = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ItineraryValidationError(ItineraryError):
    """Input rejected before any mutation was attempted."""

    status_code = 400


class ItineraryNotFoundError(ItineraryError):
    status_code = 404

    def __init__(self, detail: str = "Itinerary not found"):
        super().__init__(detail)


class InvalidTransitionError(ItineraryError):
    status_code = 409


class ConflictError(ItineraryError):
    """The stored version moved on since the caller last read it."""

    status_code = 409


class PersistenceError(ItineraryError):
    status_code = 500

    def __init__(self, detail: str = "A database error occurred."):
        super().__init__(detail)
