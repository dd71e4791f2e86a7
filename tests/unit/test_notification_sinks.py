"""Unit tests for notification sink implementations"""

import threading
import time
from datetime import datetime

import pytest
from sqlalchemy import text
from sqlalchemy.orm import Session

from card_calendar.domain.exceptions import StorageError
from card_calendar.domain.models import ReminderKind, ReminderRequest
from card_calendar.infrastructure.notifications.memory import InMemoryNotificationSink
from card_calendar.infrastructure.notifications.sql import SqlNotificationSink


@pytest.fixture(params=["memory", "sql"])
def any_sink(request, session_factory):
    if request.param == "memory":
        return InMemoryNotificationSink(authorized=True)
    return SqlNotificationSink(session_factory, authorized=True)


def reminder(key: str, fire_at: datetime, card_id: str = "card-1", body: str = "") -> ReminderRequest:
    return ReminderRequest(key=key, card_id=card_id, fire_at=fire_at, kind=ReminderKind.PAYMENT, body=body)


def test_upsert_replaces_same_key(any_sink):
    any_sink.upsert(reminder("payment-reminder-card-1", datetime(2026, 2, 1, 9, 0), body="first"))
    any_sink.upsert(reminder("payment-reminder-card-1", datetime(2026, 3, 1, 9, 0), body="second"))

    pending = any_sink.pending()
    assert len(pending) == 1
    assert pending[0].fire_at == datetime(2026, 3, 1, 9, 0)
    assert pending[0].body == "second"


def test_pending_ordered_by_fire_time(any_sink):
    any_sink.upsert(reminder("b", datetime(2026, 3, 1, 9, 0)))
    any_sink.upsert(reminder("a", datetime(2026, 2, 1, 9, 0)))

    assert [r.key for r in any_sink.pending()] == ["a", "b"]


def test_cancel_ignores_missing_keys(any_sink):
    any_sink.upsert(reminder("a", datetime(2026, 2, 1, 9, 0)))

    any_sink.cancel(["a", "missing"])
    any_sink.cancel(["a"])
    any_sink.cancel([])

    assert any_sink.pending() == []


def test_cancel_all(any_sink):
    any_sink.upsert(reminder("a", datetime(2026, 2, 1, 9, 0)))
    any_sink.upsert(reminder("b", datetime(2026, 2, 2, 9, 0), card_id="card-2"))

    any_sink.cancel_all()

    assert any_sink.pending() == []


def test_sql_sink_round_trips_request(session_factory):
    sink = SqlNotificationSink(session_factory)
    original = ReminderRequest(
        key="cut-date-card-1",
        card_id="card-1",
        fire_at=datetime(2026, 2, 15, 9, 0),
        kind=ReminderKind.CUT_DATE,
        title="Statement cut",
        body="Today is the cut date for your card Visa",
    )

    sink.upsert(original)

    assert sink.pending() == [original]


def test_set_authorized_notifies_on_transition_only():
    sink = InMemoryNotificationSink(authorized=False)
    events = []
    sink.on_authorization_changed(events.append)

    sink.set_authorized(False)
    sink.set_authorized(True)
    sink.set_authorized(True)
    sink.set_authorized(False)

    assert events == [True, False]
    assert sink.is_authorized() is False


def test_sql_sink_concurrent_upserts_keep_one_row(session_factory, monkeypatch):
    """Two writers racing on a new key both succeed and leave a single row"""
    sink = SqlNotificationSink(session_factory, authorized=True)
    real_get = Session.get

    def delayed_get(self, *args, **kwargs):
        time.sleep(0.3)
        return real_get(self, *args, **kwargs)

    monkeypatch.setattr(Session, "get", delayed_get)
    start = threading.Barrier(2)
    errors = []

    def write(body: str) -> None:
        start.wait()
        try:
            sink.upsert(reminder("payment-reminder-card-1", datetime(2026, 2, 1, 9, 0), body=body))
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=write, args=(body,)) for body in ("first", "second")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    pending = sink.pending()
    assert errors == []
    assert len(pending) == 1
    assert pending[0].body in {"first", "second"}


def test_sql_sink_database_failure_raises_storage_error(session_factory):
    sink = SqlNotificationSink(session_factory, authorized=True)
    with session_factory() as db:
        db.execute(text("DROP TABLE pending_reminder"))
        db.commit()

    with pytest.raises(StorageError):
        sink.upsert(reminder("a", datetime(2026, 2, 1, 9, 0)))
    with pytest.raises(StorageError):
        sink.cancel(["a"])
    with pytest.raises(StorageError):
        sink.cancel_all()
    with pytest.raises(StorageError):
        sink.pending()


def test_failed_authorization_handler_runs_again_on_repeat():
    """A grant whose handler raised is delivered again by the next identical grant"""
    sink = InMemoryNotificationSink(authorized=False)
    attempts = []

    def handler(granted: bool) -> None:
        attempts.append(granted)
        if len(attempts) == 1:
            raise StorageError("card store down")

    sink.on_authorization_changed(handler)

    with pytest.raises(StorageError):
        sink.set_authorized(True)
    sink.set_authorized(True)
    sink.set_authorized(True)

    assert attempts == [True, True]
    assert sink.is_authorized() is True
