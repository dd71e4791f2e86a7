"""Card CRUD endpoints and per-card cycle queries"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from card_calendar.api.dependencies import get_card_service, get_clock, get_request_id
from card_calendar.api.v1.schemas import (
    CardCreateRequest,
    CardMutationResponse,
    CardResponse,
    CardUpdateRequest,
    CutDateItem,
    CycleResponse,
    ReminderSchema,
)
from card_calendar.domain.cycle import evaluate
from card_calendar.domain.exceptions import CardNotFoundError, StorageError, ValidationError
from card_calendar.domain.models import Card, CycleSummary, ReminderRequest, UrgencyStatus
from card_calendar.services.cards import CardMutation, CardService
from card_calendar.utils.clock import Clock

router = APIRouter()


def cycle_response(summary: CycleSummary) -> CycleResponse:
    return CycleResponse(
        next_cut_date=summary.next_cut_date,
        payment_due_date=summary.payment_due_date,
        days_until_payment=summary.days_until_payment,
        urgency_status=summary.urgency_status,
        status_label=summary.urgency_status.label,
        status_color=summary.urgency_status.color,
    )


def card_response(card: Card, clock: Clock) -> CardResponse:
    return CardResponse(
        id=card.id,
        name=card.name,
        cut_day=card.billing_profile.cut_day,
        payment_days=card.billing_profile.payment_days,
        color_tag=card.color_tag,
        last_updated=card.last_updated,
        cycle=cycle_response(evaluate(card.billing_profile, clock.now())),
    )


def reminder_schema(request: ReminderRequest) -> ReminderSchema:
    return ReminderSchema(
        key=request.key,
        card_id=request.card_id,
        fire_at=request.fire_at,
        kind=request.kind,
        title=request.title,
        body=request.body,
    )


def mutation_response(mutation: CardMutation, clock: Clock) -> CardMutationResponse:
    return CardMutationResponse(
        card=card_response(mutation.card, clock),
        reminders=[reminder_schema(r) for r in mutation.reminders],
        notice=mutation.notice,
    )


def raise_for_domain_error(e: Exception, request_id: str) -> None:
    """Translate domain exceptions into HTTP errors"""
    if isinstance(e, ValidationError):
        logging.warning(f"Card validation failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))
    if isinstance(e, CardNotFoundError):
        raise HTTPException(status_code=404, detail=str(e))
    if isinstance(e, StorageError):
        logging.error(f"Storage error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Storage unavailable")
    raise e


@router.get("/cards", response_model=List[CardResponse])
def list_cards(
    request: Request,
    status: Optional[UrgencyStatus] = Query(None, description="Only cards in this urgency state"),
    q: str = Query("", description="Case-insensitive name filter"),
    service: CardService = Depends(get_card_service),
    clock: Clock = Depends(get_clock),
):
    """List cards, soonest payment first unless filtered by status"""
    try:
        cards = service.search(q, status)
    except StorageError as e:
        raise_for_domain_error(e, get_request_id(request))
    return [card_response(card, clock) for card in cards]


@router.post("/cards", response_model=CardMutationResponse, status_code=201)
def create_card(
    body: CardCreateRequest,
    request: Request,
    service: CardService = Depends(get_card_service),
    clock: Clock = Depends(get_clock),
):
    """
    Create a card and schedule its reminders.

    `reminders` is empty when notifications are not authorized; `notice`
    carries the one-time permission message in that case.
    """
    try:
        mutation = service.add_card(body.name, body.cut_day, body.payment_days, body.color_tag)
    except (ValidationError, StorageError) as e:
        raise_for_domain_error(e, get_request_id(request))
    return mutation_response(mutation, clock)


@router.get("/cards/due-soon", response_model=List[CardResponse])
def cards_due_soon(
    request: Request,
    days: Optional[int] = Query(None, ge=0, description="Window length in days"),
    service: CardService = Depends(get_card_service),
    clock: Clock = Depends(get_clock),
):
    """Cards whose payment is due between today and today + days"""
    window = days if days is not None else request.app.state.settings.due_soon_window_days
    try:
        cards = service.due_soon(window)
    except StorageError as e:
        raise_for_domain_error(e, get_request_id(request))
    return [card_response(card, clock) for card in cards]


@router.get("/cards/{card_id}", response_model=CardResponse)
def get_card(
    card_id: str,
    request: Request,
    service: CardService = Depends(get_card_service),
    clock: Clock = Depends(get_clock),
):
    try:
        card = service.get_card(card_id)
    except (CardNotFoundError, StorageError) as e:
        raise_for_domain_error(e, get_request_id(request))
    return card_response(card, clock)


@router.get("/cards/{card_id}/cycle", response_model=CycleResponse)
def get_card_cycle(card_id: str, request: Request, service: CardService = Depends(get_card_service)):
    try:
        summary = service.cycle(card_id)
    except (CardNotFoundError, StorageError) as e:
        raise_for_domain_error(e, get_request_id(request))
    return cycle_response(summary)


@router.patch("/cards/{card_id}", response_model=CardMutationResponse)
def update_card(
    card_id: str,
    body: CardUpdateRequest,
    request: Request,
    service: CardService = Depends(get_card_service),
    clock: Clock = Depends(get_clock),
):
    """Edit a card; its reminders are cancelled and rebuilt"""
    try:
        mutation = service.update_card(
            card_id,
            name=body.name,
            cut_day=body.cut_day,
            payment_days=body.payment_days,
            color_tag=body.color_tag,
        )
    except (ValidationError, CardNotFoundError, StorageError) as e:
        raise_for_domain_error(e, get_request_id(request))
    return mutation_response(mutation, clock)


@router.delete("/cards/{card_id}", status_code=204)
def delete_card(card_id: str, request: Request, service: CardService = Depends(get_card_service)):
    """Cancel a card's reminders, then remove it"""
    try:
        service.delete_card(card_id)
    except (CardNotFoundError, StorageError) as e:
        raise_for_domain_error(e, get_request_id(request))
    return Response(status_code=204)


@router.get("/cut-dates", response_model=List[CutDateItem])
def upcoming_cut_dates(request: Request, service: CardService = Depends(get_card_service)):
    """Next cut date per card, soonest first"""
    try:
        pairs = service.cut_dates()
    except StorageError as e:
        raise_for_domain_error(e, get_request_id(request))
    return [CutDateItem(card_id=card.id, name=card.name, next_cut_date=cut) for card, cut in pairs]
