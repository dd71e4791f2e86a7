"""Notification sink interface: pending reminder store plus permission state"""

import logging
from typing import Callable, Iterable, List

from card_calendar.domain.models import ReminderRequest

AuthorizationHandler = Callable[[bool], None]

logger = logging.getLogger(__name__)


class NotificationSink:
    """
    Keyed store of pending reminders.

    Contract for implementations:
    - `upsert` replaces any pending entry with the same key
    - `cancel` ignores keys that are not pending
    - `cancel_all` clears every entry this sink holds

    Permission state lives here too. `set_authorized` notifies subscribers
    only when the value actually changes, so repeated delivery of the same
    status is a no-op. A transition whose handlers raised stays undelivered:
    the next `set_authorized` with the same value runs the handlers again.
    """

    def __init__(self, authorized: bool = False):
        self._authorized = authorized
        self._undelivered = False
        self._handlers: List[AuthorizationHandler] = []

    def is_authorized(self) -> bool:
        return self._authorized

    def set_authorized(self, granted: bool) -> None:
        if granted == self._authorized and not self._undelivered:
            return
        self._authorized = granted
        self._undelivered = True
        logger.info("Notification authorization changed", extra={"authorized": granted})
        for handler in list(self._handlers):
            handler(granted)
        self._undelivered = False

    def on_authorization_changed(self, handler: AuthorizationHandler) -> Callable[[], None]:
        """Subscribe to permission transitions; returns the unsubscribe callable"""
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def upsert(self, request: ReminderRequest) -> None:
        raise NotImplementedError

    def cancel(self, keys: Iterable[str]) -> None:
        raise NotImplementedError

    def cancel_all(self) -> None:
        raise NotImplementedError

    def pending(self) -> List[ReminderRequest]:
        """Pending entries ordered by fire time"""
        raise NotImplementedError
