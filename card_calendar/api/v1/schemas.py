"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from card_calendar.domain.models import ReminderKind, UrgencyStatus


class CardCreateRequest(BaseModel):
    """Request body for POST /v1/cards"""

    name: str = Field(..., min_length=1, description="Card display name")
    cut_day: int = Field(..., ge=1, le=31, description="Statement cut day of month")
    payment_days: int = Field(..., ge=1, le=30, description="Days from cut date to payment due date")
    color_tag: Optional[str] = Field(None, description="Hex colour tag; random when omitted")


class CardUpdateRequest(BaseModel):
    """Request body for PATCH /v1/cards/{card_id}; omitted fields are left unchanged"""

    name: Optional[str] = Field(None, min_length=1)
    cut_day: Optional[int] = Field(None, ge=1, le=31)
    payment_days: Optional[int] = Field(None, ge=1, le=30)
    color_tag: Optional[str] = None


class CycleResponse(BaseModel):
    """Billing-cycle figures for a card relative to now"""

    next_cut_date: date
    payment_due_date: date
    days_until_payment: int
    urgency_status: UrgencyStatus
    status_label: str
    status_color: str


class CardResponse(BaseModel):
    """Card with its computed cycle"""

    id: str
    name: str
    cut_day: int
    payment_days: int
    color_tag: str
    last_updated: datetime
    cycle: CycleResponse


class ReminderSchema(BaseModel):
    """Pending reminder held by the notification sink"""

    key: str
    card_id: str
    fire_at: datetime
    kind: ReminderKind
    title: str
    body: str


class CardMutationResponse(BaseModel):
    """Response for card create/update"""

    card: CardResponse
    reminders: List[ReminderSchema]
    notice: Optional[str] = None


class SnapshotItem(BaseModel):
    """Widget row, ordered by payment due date"""

    id: str
    name: str
    payment_due_date: date
    color_tag: str
    urgency_status: UrgencyStatus
    status_label: str


class CutDateItem(BaseModel):
    card_id: str
    name: str
    next_cut_date: date


class RescheduleResponse(BaseModel):
    """Response for POST /v1/reminders/reschedule"""

    authorized: bool
    scheduled: int
    reminders: List[ReminderSchema]


class AuthorizationRequest(BaseModel):
    granted: bool


class AuthorizationResponse(BaseModel):
    authorized: bool
    pending_reminders: int
