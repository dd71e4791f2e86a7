"""Card lifecycle - the single owner of card mutations and their reminders"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import List, Optional, Tuple

from card_calendar.domain import projection
from card_calendar.domain.cycle import evaluate
from card_calendar.domain.exceptions import CardNotFoundError, StorageError, ValidationError
from card_calendar.domain.models import BillingProfile, Card, CardSnapshot, CycleSummary, ReminderRequest, UrgencyStatus
from card_calendar.domain.palette import random_color
from card_calendar.domain.validation import (
    validate_card_fields,
    validate_color_tag,
    validate_cut_day,
    validate_name,
    validate_payment_days,
)
from card_calendar.infrastructure.database.repositories import CardRepository
from card_calendar.infrastructure.observability.metrics import (
    card_mutation_counter,
    storage_failure_counter,
    validation_failure_counter,
)
from card_calendar.services.reminders import ReminderScheduler
from card_calendar.utils.clock import Clock

logger = logging.getLogger(__name__)


@dataclass
class CardMutation:
    """Outcome of a card change: the card, what got scheduled, any user notice"""

    card: Card
    reminders: List[ReminderRequest]
    notice: Optional[str] = None


class CardService:
    """
    Apply card changes and keep reminders consistent with them.

    Ordering per mutation:
    - create/edit: persist the card, then reconcile its reminders
    - delete: cancel its reminders, then remove the card

    Validation runs before anything is touched. Storage failures propagate
    as StorageError without undoing the in-memory card.
    """

    def __init__(self, repository: CardRepository, scheduler: ReminderScheduler, clock: Clock):
        self.repository = repository
        self.scheduler = scheduler
        self.clock = clock

    # Queries

    def list_cards(self) -> List[Card]:
        return self._tracked(self.repository.load)

    def get_card(self, card_id: str) -> Card:
        card = self._tracked(self.repository.get, card_id)
        if card is None:
            raise CardNotFoundError(f"Card {card_id} not found")
        return card

    def cycle(self, card_id: str) -> CycleSummary:
        return evaluate(self.get_card(card_id).billing_profile, self.clock.now())

    def snapshots(self) -> List[CardSnapshot]:
        return projection.build_snapshots(self.list_cards(), self.clock.now())

    def search(self, text: str = "", status: Optional[UrgencyStatus] = None) -> List[Card]:
        """Name search plus optional status filter; unfiltered results come soonest-due first"""
        now = self.clock.now()
        cards = projection.search_by_name(self.list_cards(), text)
        if status is not None:
            return projection.filter_by_status(cards, status, now)
        return sorted(cards, key=lambda card: evaluate(card.billing_profile, now).payment_due_date)

    def due_soon(self, days: int = 7) -> List[Card]:
        return projection.cards_due_within(self.list_cards(), self.clock.now(), days)

    def cut_dates(self) -> List[Tuple[Card, date]]:
        return projection.upcoming_cut_dates(self.list_cards(), self.clock.now())

    # Mutations

    def add_card(
        self,
        name: str,
        cut_day: int,
        payment_days: int,
        color_tag: Optional[str] = None,
    ) -> CardMutation:
        try:
            validate_card_fields(name, cut_day, payment_days, color_tag)
        except ValidationError:
            validation_failure_counter.inc()
            raise

        card = Card(
            name=name.strip(),
            billing_profile=BillingProfile(cut_day=cut_day, payment_days=payment_days),
            color_tag=color_tag.strip() if color_tag else random_color(),
            last_updated=self.clock.now(),
        )
        self._tracked(self.repository.add, card)
        card_mutation_counter.labels(action="create").inc()
        logger.info("Card created", extra={"card_id": card.id})

        return self._reconciled(card)

    def update_card(
        self,
        card_id: str,
        name: Optional[str] = None,
        cut_day: Optional[int] = None,
        payment_days: Optional[int] = None,
        color_tag: Optional[str] = None,
    ) -> CardMutation:
        """Apply the given fields only; reminders are always rebuilt"""
        card = self.get_card(card_id)

        try:
            new_name = validate_name(name) if name is not None else card.name
            new_cut_day = validate_cut_day(cut_day) if cut_day is not None else card.billing_profile.cut_day
            new_payment_days = (
                validate_payment_days(payment_days) if payment_days is not None else card.billing_profile.payment_days
            )
            new_color = validate_color_tag(color_tag) if color_tag is not None else card.color_tag
        except ValidationError:
            validation_failure_counter.inc()
            raise

        updated = replace(
            card,
            name=new_name,
            billing_profile=BillingProfile(cut_day=new_cut_day, payment_days=new_payment_days),
            color_tag=new_color,
            last_updated=self.clock.now(),
        )
        self._tracked(self.repository.update, updated)
        card_mutation_counter.labels(action="update").inc()
        logger.info("Card updated", extra={"card_id": card_id})

        # Previous reminders are stale even when permission is now missing
        self.scheduler.cancel(card_id)
        return self._reconciled(updated)

    def delete_card(self, card_id: str) -> None:
        self.get_card(card_id)
        self.scheduler.cancel(card_id)
        self._tracked(self.repository.delete, card_id)
        card_mutation_counter.labels(action="delete").inc()
        logger.info("Card deleted", extra={"card_id": card_id})

    def reschedule_all(self) -> List[ReminderRequest]:
        return self.scheduler.reschedule_all(self.list_cards())

    def _reconciled(self, card: Card) -> CardMutation:
        reminders = self.scheduler.reconcile(card)
        return CardMutation(card=card, reminders=reminders, notice=self.scheduler.consume_authorization_notice())

    def _tracked(self, operation, *args):
        try:
            return operation(*args)
        except StorageError:
            storage_failure_counter.inc()
            raise
