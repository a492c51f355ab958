"""
Notification Bus - Typed in-process events for account connection changes
"""

from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Deque, Dict, List
import logging

logger = logging.getLogger(__name__)

RECENT_EVENTS_PER_USER = 50


class EventType(str, Enum):
    GOOGLE_OAUTH_SUCCESS = "google-oauth-success"
    GOOGLE_ADS_CONNECTED = "google-ads-connected"
    GOOGLE_ADS_ACCOUNTS_LOADED = "google-ads-accounts-loaded"
    GOOGLE_ADS_ACCOUNT_SELECTED = "google-ads-account-selected"


@dataclass
class Event:
    type: EventType
    user_id: str
    payload: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "user_id": self.user_id,
            "payload": self.payload,
            "created_at": self.created_at.isoformat(),
        }


Handler = Callable[[Event], Awaitable[None]]


class NotificationBus:
    """
    Dispatches events to async handlers in subscription order

    A failing handler is logged and the remaining handlers still run. The
    last events of each user are kept so a polling client can catch up.
    """

    def __init__(self, history_size: int = RECENT_EVENTS_PER_USER):
        self._handlers: Dict[EventType, List[Handler]] = defaultdict(list)
        self._recent: Dict[str, Deque[Event]] = defaultdict(lambda: deque(maxlen=history_size))

    def subscribe(self, event_type: EventType, handler: Handler) -> Callable[[], None]:
        """
        Register a handler

        Returns:
            Callable that removes this subscription
        """
        self._handlers[event_type].append(handler)

        def unsubscribe():
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)

        return unsubscribe

    async def publish(self, event: Event) -> None:
        self._recent[event.user_id].append(event)
        logger.info(f"Event {event.type.value} for user {event.user_id}")

        for handler in list(self._handlers[event.type]):
            try:
                await handler(event)
            except Exception as e:
                logger.error(f"Handler for {event.type.value} failed: {str(e)}", exc_info=True)

    def recent(self, user_id: str) -> List[Event]:
        """Events of a user, oldest first"""
        return list(self._recent.get(user_id, ()))

    def clear(self) -> None:
        self._handlers.clear()
        self._recent.clear()


_bus = NotificationBus()


def get_notification_bus() -> NotificationBus:
    """Get the global notification bus instance."""
    return _bus
