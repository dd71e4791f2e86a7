"""Billing-cycle calculator - statement cut dates, due dates and urgency"""

from datetime import date, timedelta

from card_calendar.domain.models import BillingProfile, CycleSummary, UrgencyStatus
from card_calendar.utils.date_utils import DateLike, as_date, clamped_day, next_month


def next_cut_date(profile: BillingProfile, reference: DateLike) -> date:
    """
    Next statement cut date on or after the reference day.

    Rules:
    - Cut falls on `cut_day` of the reference month
    - Months shorter than `cut_day` clamp to their last day (cut day 31 in
      February is Feb 28/29, never early March)
    - A cut date before the reference day moves to the following month,
      clamped again from the configured `cut_day`

    Comparison is per calendar day: a cut date equal to the reference day is
    the next cut, whatever the reference time of day.
    """
    today = as_date(reference)
    cut = clamped_day(today.year, today.month, profile.cut_day)
    if cut < today:
        year, month = next_month(today.year, today.month)
        cut = clamped_day(year, month, profile.cut_day)
    return cut


def payment_due_date(profile: BillingProfile, reference: DateLike) -> date:
    """Next cut date plus `payment_days` calendar days"""
    return next_cut_date(profile, reference) + timedelta(days=profile.payment_days)


def days_until(due_date: date, reference: DateLike) -> int:
    """Whole calendar days from the reference day to a due date (negative once overdue)"""
    return (due_date - as_date(reference)).days


def days_until_payment(profile: BillingProfile, reference: DateLike) -> int:
    """Days left until the payment due date derived at the same reference"""
    return days_until(payment_due_date(profile, reference), reference)


def urgency_status(days_left: int) -> UrgencyStatus:
    """
    Classify days left until payment.

    Bands (inclusive):
        <= 0  -> OVERDUE
        1..3  -> URGENT
        4..7  -> UPCOMING
        > 7   -> NORMAL
    """
    if days_left <= 0:
        return UrgencyStatus.OVERDUE
    if days_left <= 3:
        return UrgencyStatus.URGENT
    if days_left <= 7:
        return UrgencyStatus.UPCOMING
    return UrgencyStatus.NORMAL


def evaluate(profile: BillingProfile, reference: DateLike) -> CycleSummary:
    """All cycle figures for one profile at one reference instant"""
    cut = next_cut_date(profile, reference)
    due = cut + timedelta(days=profile.payment_days)
    days_left = days_until(due, reference)
    return CycleSummary(
        next_cut_date=cut,
        payment_due_date=due,
        days_until_payment=days_left,
        urgency_status=urgency_status(days_left),
    )
