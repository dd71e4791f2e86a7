"""Pending reminders, full reschedule and notification permission endpoints"""

from typing import List

from fastapi import APIRouter, Depends, Request

from card_calendar.api.dependencies import get_card_service, get_request_id, get_sink
from card_calendar.api.v1.cards import raise_for_domain_error, reminder_schema
from card_calendar.api.v1.schemas import (
    AuthorizationRequest,
    AuthorizationResponse,
    ReminderSchema,
    RescheduleResponse,
)
from card_calendar.domain.exceptions import StorageError
from card_calendar.infrastructure.notifications.base import NotificationSink
from card_calendar.services.cards import CardService

router = APIRouter()


@router.get("/reminders", response_model=List[ReminderSchema])
def list_reminders(request: Request, sink: NotificationSink = Depends(get_sink)):
    """Reminders currently pending in the sink, earliest first"""
    try:
        pending = sink.pending()
    except StorageError as e:
        raise_for_domain_error(e, get_request_id(request))
    return [reminder_schema(r) for r in pending]


@router.post("/reminders/reschedule", response_model=RescheduleResponse)
def reschedule_reminders(
    request: Request,
    service: CardService = Depends(get_card_service),
    sink: NotificationSink = Depends(get_sink),
):
    """Drop every pending reminder and rebuild them from the card list"""
    try:
        reminders = service.reschedule_all()
    except StorageError as e:
        raise_for_domain_error(e, get_request_id(request))

    return RescheduleResponse(
        authorized=sink.is_authorized(),
        scheduled=len(reminders),
        reminders=[reminder_schema(r) for r in reminders],
    )


@router.get("/notifications/authorization", response_model=AuthorizationResponse)
def get_authorization(request: Request, sink: NotificationSink = Depends(get_sink)):
    try:
        pending = sink.pending()
    except StorageError as e:
        raise_for_domain_error(e, get_request_id(request))
    return AuthorizationResponse(authorized=sink.is_authorized(), pending_reminders=len(pending))


@router.put("/notifications/authorization", response_model=AuthorizationResponse)
def set_authorization(body: AuthorizationRequest, request: Request, sink: NotificationSink = Depends(get_sink)):
    """
    Record the user's notification permission.

    A transition into the granted state reschedules all reminders through
    the sink's subscription; repeating the current state changes nothing,
    unless the previous reschedule failed, in which case it runs again.
    """
    try:
        sink.set_authorized(body.granted)
        pending = sink.pending()
    except StorageError as e:
        raise_for_domain_error(e, get_request_id(request))
    return AuthorizationResponse(authorized=sink.is_authorized(), pending_reminders=len(pending))
