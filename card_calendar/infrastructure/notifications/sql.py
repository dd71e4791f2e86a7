"""Notification sink persisted in the pending_reminder table"""

from contextlib import contextmanager
from typing import Iterable, Iterator, List

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.sql import func

from card_calendar.domain.exceptions import StorageError
from card_calendar.domain.models import ReminderKind, ReminderRequest
from card_calendar.infrastructure.database.models import PendingReminderRecord
from card_calendar.infrastructure.notifications.base import NotificationSink
from card_calendar.infrastructure.observability.metrics import storage_failure_counter

# Dialects with a native INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def _to_request(record: PendingReminderRecord) -> ReminderRequest:
    return ReminderRequest(
        key=record.key,
        card_id=record.card_id,
        fire_at=record.fire_at,
        kind=ReminderKind(record.kind),
        title=record.title,
        body=record.body,
    )


class SqlNotificationSink(NotificationSink):
    """
    Sink whose pending entries survive restarts.

    The reminder key is the table's primary key, and an upsert is a single
    INSERT ... ON CONFLICT DO UPDATE statement, so concurrent upserts of the
    same key leave exactly one row. Each call runs in its own short
    transaction; database errors surface as StorageError.
    """

    def __init__(self, session_factory: sessionmaker, authorized: bool = False):
        super().__init__(authorized)
        self.session_factory = session_factory

    def upsert(self, request: ReminderRequest) -> None:
        values = {
            "card_id": request.card_id,
            "kind": request.kind.value,
            "fire_at": request.fire_at,
            "title": request.title,
            "body": request.body,
        }
        with self._transaction("upsert reminder") as db:
            insert = _UPSERT_INSERTS.get(db.get_bind().dialect.name)
            if insert is None:
                db.merge(PendingReminderRecord(key=request.key, **values))
                return
            statement = insert(PendingReminderRecord).values(key=request.key, **values)
            db.execute(
                statement.on_conflict_do_update(
                    index_elements=[PendingReminderRecord.key],
                    set_={**values, "updated_at": func.now()},
                )
            )

    def cancel(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if not keys:
            return
        with self._transaction("cancel reminders") as db:
            db.query(PendingReminderRecord).filter(PendingReminderRecord.key.in_(keys)).delete(
                synchronize_session=False
            )

    def cancel_all(self) -> None:
        with self._transaction("cancel all reminders") as db:
            db.query(PendingReminderRecord).delete(synchronize_session=False)

    def pending(self) -> List[ReminderRequest]:
        with self._transaction("load pending reminders") as db:
            records = (
                db.query(PendingReminderRecord)
                .order_by(PendingReminderRecord.fire_at, PendingReminderRecord.key)
                .all()
            )
            return [_to_request(record) for record in records]

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Session]:
        """Commit on success; raise StorageError on database failure"""
        try:
            with self.session_factory() as db, db.begin():
                yield db
        except SQLAlchemyError as e:
            storage_failure_counter.inc()
            raise StorageError(f"Failed to {action}: {e}") from e
