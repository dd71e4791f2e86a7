"""Unit tests for reminder scheduling against a notification sink"""

import threading
from datetime import datetime

import pytest

from card_calendar.domain.exceptions import StorageError
from card_calendar.domain.models import ReminderKind, ReminderRequest
from card_calendar.infrastructure.notifications.memory import InMemoryNotificationSink
from card_calendar.services.reminders import AUTHORIZATION_NOTICE, ReminderScheduler


def test_reconcile_schedules_both_reminders(scheduler, sink, visa):
    requests = scheduler.reconcile(visa)

    assert {r.kind for r in requests} == {ReminderKind.PAYMENT, ReminderKind.CUT_DATE}
    assert {r.key for r in sink.pending()} == {"payment-reminder-card-visa", "cut-date-card-visa"}


def test_reconcile_twice_leaves_two_entries(scheduler, sink, visa):
    """Re-issuing replaces under the same keys instead of duplicating"""
    first = scheduler.reconcile(visa)
    second = scheduler.reconcile(visa)

    assert len(sink.pending()) == 2
    assert [r.key for r in first] == [r.key for r in second]


def test_reconcile_after_clock_moves_replaces_fire_times(scheduler, sink, clock, visa):
    scheduler.reconcile(visa)
    clock.set(datetime(2026, 2, 20, 8, 0))
    scheduler.reconcile(visa)

    fire_times = {r.kind: r.fire_at for r in sink.pending()}
    assert len(sink.pending()) == 2
    assert fire_times[ReminderKind.CUT_DATE] == datetime(2026, 3, 15, 9, 0)


def test_reconcile_unauthorized_is_noop(clock, visa):
    sink = InMemoryNotificationSink(authorized=False)
    scheduler = ReminderScheduler(sink, clock)

    assert scheduler.reconcile(visa) == []
    assert sink.pending() == []


def test_cancel_removes_both_reminders(scheduler, sink, visa, mastercard):
    scheduler.reconcile(visa)
    scheduler.reconcile(mastercard)

    scheduler.cancel(visa.id)

    assert {r.card_id for r in sink.pending()} == {mastercard.id}


def test_cancel_twice_is_safe(scheduler, sink, visa):
    scheduler.reconcile(visa)

    scheduler.cancel(visa.id)
    scheduler.cancel(visa.id)

    assert sink.pending() == []


def test_cancel_unknown_card_is_safe(scheduler, sink):
    scheduler.cancel("never-scheduled")
    assert sink.pending() == []


def test_reschedule_all_drops_stale_entries(scheduler, sink, visa, mastercard):
    """Two cards give four entries; a leftover from a deleted card is gone"""
    sink.upsert(
        ReminderRequest(
            key="payment-reminder-deleted-card",
            card_id="deleted-card",
            fire_at=datetime(2026, 2, 1, 9, 0),
            kind=ReminderKind.PAYMENT,
        )
    )

    requests = scheduler.reschedule_all([visa, mastercard])

    pending = sink.pending()
    assert len(requests) == 4
    assert len(pending) == 4
    assert "payment-reminder-deleted-card" not in {r.key for r in pending}


def test_reschedule_all_unauthorized_clears_everything(clock, visa):
    sink = InMemoryNotificationSink(authorized=True)
    scheduler = ReminderScheduler(sink, clock)
    scheduler.reconcile(visa)
    sink.set_authorized(False)

    assert scheduler.reschedule_all([visa]) == []
    assert sink.pending() == []


def test_authorization_grant_reschedules_once(clock, visa, mastercard):
    sink = InMemoryNotificationSink(authorized=False)
    scheduler = ReminderScheduler(sink, clock)
    calls = []

    def cards_provider():
        calls.append(1)
        return [visa, mastercard]

    sink.on_authorization_changed(lambda granted: scheduler.handle_authorization_change(granted, cards_provider))

    sink.set_authorized(True)
    sink.set_authorized(True)

    assert len(calls) == 1
    assert len(sink.pending()) == 4


def test_authorization_revoke_does_not_reschedule(clock, visa):
    sink = InMemoryNotificationSink(authorized=True)
    scheduler = ReminderScheduler(sink, clock)
    calls = []
    sink.on_authorization_changed(
        lambda granted: scheduler.handle_authorization_change(granted, lambda: calls.append(1) or [visa])
    )

    sink.set_authorized(False)

    assert calls == []


def test_unsubscribe_stops_authorization_handler(clock, visa):
    sink = InMemoryNotificationSink(authorized=False)
    scheduler = ReminderScheduler(sink, clock)
    unsubscribe = sink.on_authorization_changed(
        lambda granted: scheduler.handle_authorization_change(granted, lambda: [visa])
    )

    unsubscribe()
    unsubscribe()
    sink.set_authorized(True)

    assert sink.pending() == []


def test_authorization_notice_returned_once(clock, visa, mastercard):
    sink = InMemoryNotificationSink(authorized=False)
    scheduler = ReminderScheduler(sink, clock)

    assert scheduler.consume_authorization_notice() is None
    scheduler.reconcile(visa)
    assert scheduler.consume_authorization_notice() == AUTHORIZATION_NOTICE

    scheduler.reconcile(mastercard)
    assert scheduler.consume_authorization_notice() is None


def test_authorization_notice_rearmed_after_revocation(clock, visa):
    sink = InMemoryNotificationSink(authorized=False)
    scheduler = ReminderScheduler(sink, clock)
    sink.on_authorization_changed(lambda granted: scheduler.handle_authorization_change(granted, lambda: [visa]))

    scheduler.reconcile(visa)
    scheduler.consume_authorization_notice()
    sink.set_authorized(True)
    sink.set_authorized(False)
    scheduler.reconcile(visa)

    assert scheduler.consume_authorization_notice() == AUTHORIZATION_NOTICE


def test_authorization_grant_retried_after_failed_reschedule(clock, visa, mastercard):
    """A repeated grant reschedules when the first attempt could not load cards"""
    sink = InMemoryNotificationSink(authorized=False)
    scheduler = ReminderScheduler(sink, clock)
    calls = []

    def cards_provider():
        calls.append(1)
        if len(calls) == 1:
            raise StorageError("card store down")
        return [visa, mastercard]

    sink.on_authorization_changed(lambda granted: scheduler.handle_authorization_change(granted, cards_provider))

    with pytest.raises(StorageError):
        sink.set_authorized(True)
    assert sink.pending() == []

    sink.set_authorized(True)
    sink.set_authorized(True)

    assert len(calls) == 2
    assert len(sink.pending()) == 4


def test_authorization_notice_handed_out_once_across_threads(clock, mastercard):
    sink = InMemoryNotificationSink(authorized=False)
    scheduler = ReminderScheduler(sink, clock)
    start = threading.Barrier(8)
    notices = []

    def create() -> None:
        start.wait()
        scheduler.reconcile(mastercard)
        notices.append(scheduler.consume_authorization_notice())

    threads = [threading.Thread(target=create) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert [n for n in notices if n is not None] == [AUTHORIZATION_NOTICE]
