# itinerary_studio/services/store.py
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from itinerary_studio.models.itinerary import Itinerary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreEvent:
    kind: str  # "loaded", "saved", "removed", "current"
    itinerary_id: Optional[str] = None


Listener = Callable[[StoreEvent], None]


class ItineraryStore:
    """
    Working set of itineraries plus the "current itinerary" pointer.

    One instance is shared by every consumer that needs it; consumers that
    render the data subscribe to be told when another consumer changed it.
    Writes are last-one-wins; version conflicts are detected by the repository.
    """

    def __init__(self) -> None:
        self._itineraries: Dict[str, Itinerary] = {}
        self._current_id: Optional[str] = None
        self._listeners: List[Listener] = []

    # --- subscription ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: StoreEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # a broken subscriber must not undo a write that already happened
                logger.exception("Store listener failed on %s", event)

    # --- reads ---

    @property
    def itineraries(self) -> List[Itinerary]:
        return list(self._itineraries.values())

    def get(self, itinerary_id: str) -> Optional[Itinerary]:
        return self._itineraries.get(itinerary_id)

    @property
    def current(self) -> Optional[Itinerary]:
        if self._current_id is None:
            return None
        return self._itineraries.get(self._current_id)

    # --- writes ---

    def replace_all(self, itineraries: List[Itinerary]) -> None:
        self._itineraries = {i.id: i for i in itineraries}
        if self._current_id not in self._itineraries:
            self._current_id = None
        self._emit(StoreEvent("loaded"))

    def put(self, itinerary: Itinerary) -> None:
        if itinerary.id not in self._itineraries:
            # newest first, matching the repository listing
            self._itineraries = {itinerary.id: itinerary, **self._itineraries}
        else:
            self._itineraries[itinerary.id] = itinerary
        self._emit(StoreEvent("saved", itinerary.id))

    def remove(self, itinerary_id: str) -> None:
        self._itineraries.pop(itinerary_id, None)
        if self._current_id == itinerary_id:
            self._current_id = None
        self._emit(StoreEvent("removed", itinerary_id))

    def set_current(self, itinerary: Optional[Itinerary]) -> None:
        if itinerary is None:
            self._current_id = None
        else:
            self._itineraries[itinerary.id] = itinerary
            self._current_id = itinerary.id
        self._emit(StoreEvent("current", self._current_id))
