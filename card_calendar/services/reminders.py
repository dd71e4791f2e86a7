"""Reminder scheduler - keeps the notification sink in step with the card list"""

import threading
from typing import Callable, Iterable, List, Optional

from card_calendar.config import Settings
from card_calendar.domain.models import Card, ReminderRequest
from card_calendar.domain.reminders import ReminderPolicy, build_requests, card_reminder_keys
from card_calendar.infrastructure.notifications.base import NotificationSink
from card_calendar.infrastructure.observability.logging import (
    log_authorization_notice,
    log_cancel,
    log_reconcile,
    log_reschedule_all,
)
from card_calendar.infrastructure.observability.metrics import (
    reconcile_skipped_counter,
    reminder_cancel_counter,
    reminder_upsert_counter,
    reschedule_all_counter,
)
from card_calendar.utils.clock import Clock

AUTHORIZATION_NOTICE = "Notifications are disabled. Enable them in settings to receive payment reminders."


def policy_from_settings(settings: Settings) -> ReminderPolicy:
    return ReminderPolicy(
        payment_days_before=settings.payment_reminder_days_before,
        payment_hour=settings.payment_reminder_hour,
        payment_minute=settings.payment_reminder_minute,
        cut_hour=settings.cut_reminder_hour,
        cut_minute=settings.cut_reminder_minute,
    )


class ReminderScheduler:
    """
    Issue idempotent schedule/cancel requests for card reminders.

    Every card owns exactly two sink keys (payment and cut date). Re-issuing
    a request replaces the pending entry under the same key, so reconciling
    twice never duplicates reminders. Sink errors are not retried here.
    """

    def __init__(self, sink: NotificationSink, clock: Clock, policy: Optional[ReminderPolicy] = None):
        self.sink = sink
        self.clock = clock
        self.policy = policy or ReminderPolicy()
        # Guards the notice flags; endpoints run in a threadpool
        self._notice_lock = threading.Lock()
        self._notice_pending = True
        self._notice_undelivered = False

    def reconcile(self, card: Card) -> List[ReminderRequest]:
        """
        Schedule both reminders for a card.

        Without notification permission nothing is scheduled and an empty
        list is returned; this is not an error.
        """
        if not self.sink.is_authorized():
            reconcile_skipped_counter.inc()
            with self._notice_lock:
                first_skip = self._notice_pending
                if first_skip:
                    self._notice_pending = False
                    self._notice_undelivered = True
            if first_skip:
                log_authorization_notice(card.id)
            return []

        requests = build_requests(card, self.clock.now(), self.policy)
        for request in requests:
            self.sink.upsert(request)
            reminder_upsert_counter.labels(kind=request.kind.value).inc()

        log_reconcile(card.id, requests)
        return requests

    def cancel(self, card_id: str) -> None:
        """Drop both reminders for a card; safe when none are pending"""
        keys = card_reminder_keys(card_id)
        self.sink.cancel(keys)
        reminder_cancel_counter.inc()
        log_cancel(card_id, keys)

    def reschedule_all(self, cards: Iterable[Card]) -> List[ReminderRequest]:
        """Clear every pending reminder, then reconcile each card"""
        cards = list(cards)
        self.sink.cancel_all()
        reschedule_all_counter.inc()

        requests: List[ReminderRequest] = []
        for card in cards:
            requests.extend(self.reconcile(card))

        log_reschedule_all(len(cards), len(requests))
        return requests

    def handle_authorization_change(self, granted: bool, cards_provider: Callable[[], List[Card]]) -> None:
        """Sink subscription handler: a grant reschedules everything"""
        with self._notice_lock:
            self._notice_pending = True
            self._notice_undelivered = False
        if granted:
            self.reschedule_all(cards_provider())

    def consume_authorization_notice(self) -> Optional[str]:
        """
        User-facing notice for missing permission.

        Returned once after the first skipped reconcile of a period without
        permission, then None until permission is granted and lost again.
        """
        with self._notice_lock:
            if not self._notice_undelivered:
                return None
            self._notice_undelivered = False
        return AUTHORIZATION_NOTICE
