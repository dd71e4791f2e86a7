"""Dependency injection for FastAPI endpoints"""

from typing import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from card_calendar.infrastructure.database.repositories import CardRepository
from card_calendar.infrastructure.notifications.base import NotificationSink
from card_calendar.services.cards import CardService
from card_calendar.services.reminders import ReminderScheduler
from card_calendar.utils.clock import Clock


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_db(request: Request) -> Generator[Session, None, None]:
    """Database session scoped to one request"""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_sink(request: Request) -> NotificationSink:
    return request.app.state.sink


def get_scheduler(request: Request) -> ReminderScheduler:
    return request.app.state.scheduler


def get_card_service(
    db: Session = Depends(get_db),
    scheduler: ReminderScheduler = Depends(get_scheduler),
    clock: Clock = Depends(get_clock),
) -> CardService:
    """Provide a card service bound to the request's session"""
    return CardService(CardRepository(db), scheduler, clock)
