"""Card input validation, applied before any card or reminder state changes"""

from typing import Optional

from card_calendar.domain.exceptions import ValidationError

CUT_DAY_RANGE = range(1, 32)
PAYMENT_DAYS_RANGE = range(1, 31)


def validate_name(name: Optional[str]) -> str:
    if name is None or not name.strip():
        raise ValidationError("Card name cannot be empty")
    return name.strip()


def validate_cut_day(cut_day: int) -> int:
    if cut_day not in CUT_DAY_RANGE:
        raise ValidationError("Cut day must be between 1 and 31")
    return cut_day


def validate_payment_days(payment_days: int) -> int:
    if payment_days not in PAYMENT_DAYS_RANGE:
        raise ValidationError("Payment days must be between 1 and 30")
    return payment_days


def validate_color_tag(color_tag: str) -> str:
    if not color_tag.strip():
        raise ValidationError("Color tag cannot be empty")
    return color_tag.strip()


def validate_card_fields(
    name: Optional[str],
    cut_day: int,
    payment_days: int,
    color_tag: Optional[str] = None,
) -> None:
    """Raise ValidationError on the first invalid field"""
    validate_name(name)
    validate_cut_day(cut_day)
    validate_payment_days(payment_days)
    if color_tag is not None:
        validate_color_tag(color_tag)
