"""Domain models - pure Python dataclasses representing business entities"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from card_calendar.domain import palette


@dataclass(frozen=True)
class BillingProfile:
    """Recurrence rules for a card's statement cycle"""

    cut_day: int  # day of month, 1-31
    payment_days: int  # days from cut date to due date, 1-30


@dataclass
class Card:
    """Credit card tracked by the calendar"""

    name: str
    billing_profile: BillingProfile
    last_updated: datetime  # from the caller's Clock
    color_tag: str = field(default_factory=palette.random_color)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


class UrgencyStatus(str, Enum):
    """How close the next payment due date is"""

    NORMAL = "normal"
    UPCOMING = "upcoming"
    URGENT = "urgent"
    OVERDUE = "overdue"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @property
    def color(self) -> str:
        return _STATUS_COLORS[self]


_STATUS_LABELS = {
    UrgencyStatus.NORMAL: "On track",
    UrgencyStatus.UPCOMING: "Upcoming",
    UrgencyStatus.URGENT: "Urgent",
    UrgencyStatus.OVERDUE: "Overdue",
}

_STATUS_COLORS = {
    UrgencyStatus.NORMAL: palette.GREEN,
    UrgencyStatus.UPCOMING: palette.YELLOW,
    UrgencyStatus.URGENT: palette.ORANGE,
    UrgencyStatus.OVERDUE: palette.RED,
}


@dataclass(frozen=True)
class CycleSummary:
    """Billing-cycle figures for one card at one reference instant"""

    next_cut_date: date
    payment_due_date: date
    days_until_payment: int
    urgency_status: UrgencyStatus


class ReminderKind(str, Enum):
    CUT_DATE = "cut_date"
    PAYMENT = "payment"


@dataclass(frozen=True)
class ReminderRequest:
    """Pending local reminder, replaced in place when re-issued under the same key"""

    key: str
    card_id: str
    fire_at: datetime
    kind: ReminderKind
    title: str = ""
    body: str = ""


@dataclass(frozen=True)
class CardSnapshot:
    """Flattened read model consumed by list views and widgets"""

    id: str
    name: str
    payment_due_date: date
    color_tag: str
    urgency_status: UrgencyStatus
