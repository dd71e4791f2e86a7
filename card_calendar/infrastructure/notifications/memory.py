"""Process-local notification sink"""

from typing import Dict, Iterable, List

from card_calendar.domain.models import ReminderRequest
from card_calendar.infrastructure.notifications.base import NotificationSink


class InMemoryNotificationSink(NotificationSink):
    """Dict-backed sink; keys are unique by construction"""

    def __init__(self, authorized: bool = False):
        super().__init__(authorized)
        self._pending: Dict[str, ReminderRequest] = {}

    def upsert(self, request: ReminderRequest) -> None:
        self._pending[request.key] = request

    def cancel(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._pending.pop(key, None)

    def cancel_all(self) -> None:
        self._pending.clear()

    def pending(self) -> List[ReminderRequest]:
        return sorted(self._pending.values(), key=lambda r: (r.fire_at, r.key))
