"""Reminder request construction for a card's cut and payment dates"""

from dataclasses import dataclass
from datetime import timedelta
from typing import List

from card_calendar.domain.cycle import evaluate
from card_calendar.domain.models import Card, ReminderKind, ReminderRequest
from card_calendar.utils.date_utils import DateLike, at_time_of_day

_KEY_PREFIXES = {
    ReminderKind.CUT_DATE: "cut-date",
    ReminderKind.PAYMENT: "payment-reminder",
}


@dataclass(frozen=True)
class ReminderPolicy:
    """When reminders fire relative to the cycle dates (local time)"""

    payment_days_before: int = 3
    payment_hour: int = 9
    payment_minute: int = 0
    cut_hour: int = 9
    cut_minute: int = 0


def reminder_key(card_id: str, kind: ReminderKind) -> str:
    """Deterministic sink key for one (card, kind) pair"""
    return f"{_KEY_PREFIXES[kind]}-{card_id}"


def card_reminder_keys(card_id: str) -> List[str]:
    return [reminder_key(card_id, ReminderKind.PAYMENT), reminder_key(card_id, ReminderKind.CUT_DATE)]


def build_requests(card: Card, reference: DateLike, policy: ReminderPolicy) -> List[ReminderRequest]:
    """
    Build the payment and cut-date reminders for a card.

    - Cut reminder fires on the next cut date at the cut time of day
    - Payment reminder fires `payment_days_before` days ahead of the due date
      at the payment time of day

    Both requests are always returned together.
    """
    summary = evaluate(card.billing_profile, reference)
    payment_day = summary.payment_due_date - timedelta(days=policy.payment_days_before)

    return [
        ReminderRequest(
            key=reminder_key(card.id, ReminderKind.PAYMENT),
            card_id=card.id,
            fire_at=at_time_of_day(payment_day, policy.payment_hour, policy.payment_minute),
            kind=ReminderKind.PAYMENT,
            title="Payment reminder",
            body=f"Your card {card.name} is due on {summary.payment_due_date.strftime('%d %B %Y')}",
        ),
        ReminderRequest(
            key=reminder_key(card.id, ReminderKind.CUT_DATE),
            card_id=card.id,
            fire_at=at_time_of_day(summary.next_cut_date, policy.cut_hour, policy.cut_minute),
            kind=ReminderKind.CUT_DATE,
            title="Statement cut",
            body=f"Today is the cut date for your card {card.name}",
        ),
    ]
