import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, List

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    level: str  # "success" or "error"
    title: str
    description: str


class Notifier:
    """
    Fire-and-forget user notifications. Every message is logged and handed to
    the subscribers (a UI would turn them into toasts); nothing is returned.
    """

    def __init__(self) -> None:
        self._subscribers: List[Callable[[Notification], None]] = []
        self.history: deque = deque(maxlen=100)

    def subscribe(self, callback: Callable[[Notification], None]) -> None:
        self._subscribers.append(callback)

    def _publish(self, notification: Notification) -> None:
        self.history.append(notification)
        for callback in list(self._subscribers):
            try:
                callback(notification)
            except Exception:
                logger.exception("Notification subscriber failed")

    def success(self, title: str, description: str) -> None:
        logger.info("%s: %s", title, description)
        self._publish(Notification("success", title, description))

    def error(self, title: str, description: str) -> None:
        logger.warning("%s: %s", title, description)
        self._publish(Notification("error", title, description))
