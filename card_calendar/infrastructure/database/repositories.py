"""Card store backed by SQLAlchemy"""

from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from card_calendar.domain.exceptions import StorageError
from card_calendar.domain.models import BillingProfile, Card
from card_calendar.infrastructure.database.models import CardRecord


def _to_domain(record: CardRecord) -> Card:
    return Card(
        id=record.id,
        name=record.name,
        billing_profile=BillingProfile(cut_day=record.cut_day, payment_days=record.payment_days),
        color_tag=record.color_tag,
        last_updated=record.last_updated,
    )


def _apply(record: CardRecord, card: Card) -> None:
    record.name = card.name
    record.cut_day = card.billing_profile.cut_day
    record.payment_days = card.billing_profile.payment_days
    record.color_tag = card.color_tag
    record.last_updated = card.last_updated


class CardRepository:
    """Repository for credit cards"""

    def __init__(self, db: Session):
        self.db = db

    def load(self) -> List[Card]:
        """Fetch every card, oldest first"""
        try:
            records = self.db.query(CardRecord).order_by(CardRecord.created_at, CardRecord.id).all()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load cards: {e}") from e
        return [_to_domain(record) for record in records]

    def get(self, card_id: str) -> Optional[Card]:
        try:
            record = self.db.get(CardRecord, card_id)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load card {card_id}: {e}") from e
        return _to_domain(record) if record else None

    def add(self, card: Card) -> None:
        with self._writing("add card"):
            record = CardRecord(id=card.id)
            _apply(record, card)
            self.db.add(record)

    def update(self, card: Card) -> None:
        with self._writing("update card"):
            self._upsert(card)

    def delete(self, card_id: str) -> None:
        """Remove a card; missing ids are ignored"""
        with self._writing("delete card"):
            self.db.query(CardRecord).filter(CardRecord.id == card_id).delete()

    def save(self, cards: Iterable[Card]) -> None:
        """Replace the stored card list with `cards`"""
        cards = list(cards)
        with self._writing("save cards"):
            keep_ids = [card.id for card in cards]
            self.db.query(CardRecord).filter(CardRecord.id.notin_(keep_ids)).delete(synchronize_session=False)
            for card in cards:
                self._upsert(card)

    def _upsert(self, card: Card) -> None:
        record = self.db.get(CardRecord, card.id)
        if record is None:
            record = CardRecord(id=card.id)
            self.db.add(record)
        _apply(record, card)

    @contextmanager
    def _writing(self, action: str) -> Iterator[None]:
        """Commit on success; roll back and raise StorageError on database failure"""
        try:
            yield
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"Failed to {action}: {e}") from e
