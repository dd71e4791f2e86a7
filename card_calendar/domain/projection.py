"""Read-side projections over the card list"""

from datetime import date, timedelta
from typing import Iterable, List, Tuple

from card_calendar.domain.cycle import evaluate, next_cut_date
from card_calendar.domain.models import Card, CardSnapshot, UrgencyStatus
from card_calendar.utils.date_utils import DateLike, as_date


def build_snapshots(cards: Iterable[Card], reference: DateLike) -> List[CardSnapshot]:
    """
    Flatten cards into display snapshots ordered by payment due date.

    Ties on the due date are ordered by card name so the output is stable
    across reads.
    """
    snapshots = []
    for card in cards:
        summary = evaluate(card.billing_profile, reference)
        snapshots.append(
            CardSnapshot(
                id=card.id,
                name=card.name,
                payment_due_date=summary.payment_due_date,
                color_tag=card.color_tag,
                urgency_status=summary.urgency_status,
            )
        )
    return sorted(snapshots, key=lambda s: (s.payment_due_date, s.name))


def cards_due_within(cards: Iterable[Card], reference: DateLike, days: int = 7) -> List[Card]:
    """Cards whose payment due date falls in [reference day, reference day + days]"""
    start = as_date(reference)
    end = start + timedelta(days=days)
    due = []
    for card in cards:
        due_date = evaluate(card.billing_profile, reference).payment_due_date
        if start <= due_date <= end:
            due.append(card)
    return due


def upcoming_cut_dates(cards: Iterable[Card], reference: DateLike) -> List[Tuple[Card, date]]:
    """(card, next cut date) pairs, soonest first"""
    pairs = [(card, next_cut_date(card.billing_profile, reference)) for card in cards]
    return sorted(pairs, key=lambda pair: pair[1])


def filter_by_status(cards: Iterable[Card], status: UrgencyStatus, reference: DateLike) -> List[Card]:
    return [card for card in cards if evaluate(card.billing_profile, reference).urgency_status == status]


def search_by_name(cards: Iterable[Card], text: str) -> List[Card]:
    """Case-insensitive substring match on card name; blank text matches everything"""
    needle = text.strip().casefold()
    if not needle:
        return list(cards)
    return [card for card in cards if needle in card.name.casefold()]
