"""Pytest fixtures for testing"""

from datetime import datetime
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from card_calendar.api.main import create_app
from card_calendar.config import Settings
from card_calendar.domain.models import BillingProfile, Card
from card_calendar.infrastructure.database.repositories import CardRepository
from card_calendar.infrastructure.database.session import build_engine, build_session_factory, create_tables
from card_calendar.infrastructure.notifications.memory import InMemoryNotificationSink
from card_calendar.services.cards import CardService
from card_calendar.services.reminders import ReminderScheduler
from card_calendar.utils.clock import FixedClock

# Tuesday morning, mid-January
NOW = datetime(2026, 1, 20, 10, 30)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def sink() -> InMemoryNotificationSink:
    """Sink with notification permission already granted"""
    return InMemoryNotificationSink(authorized=True)


@pytest.fixture
def scheduler(sink: InMemoryNotificationSink, clock: FixedClock) -> ReminderScheduler:
    return ReminderScheduler(sink, clock)


@pytest.fixture
def session_factory(tmp_path) -> Generator[sessionmaker, None, None]:
    """File-backed SQLite database per test"""
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    create_tables(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def repository(db: Session) -> CardRepository:
    return CardRepository(db)


@pytest.fixture
def service(repository: CardRepository, scheduler: ReminderScheduler, clock: FixedClock) -> CardService:
    return CardService(repository, scheduler, clock)


@pytest.fixture
def visa() -> Card:
    return Card(
        id="card-visa",
        name="Visa Platinum",
        billing_profile=BillingProfile(cut_day=15, payment_days=20),
        color_tag="2196F3",
        last_updated=NOW,
    )


@pytest.fixture
def mastercard() -> Card:
    return Card(
        id="card-mc",
        name="Mastercard Gold",
        billing_profile=BillingProfile(cut_day=5, payment_days=25),
        color_tag="FFC107",
        last_updated=NOW,
    )


@pytest.fixture
def app_settings(tmp_path) -> Settings:
    return Settings(database_url=f"sqlite:///{tmp_path / 'api.db'}", notifications_authorized=True)


@pytest.fixture
def client(app_settings: Settings, sink: InMemoryNotificationSink, clock: FixedClock) -> Generator[TestClient, None, None]:
    """FastAPI test client with a temporary database, in-memory sink and fixed clock"""
    app = create_app(app_settings, sink=sink, clock=clock)
    with TestClient(app) as test_client:
        yield test_client
