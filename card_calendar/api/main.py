"""FastAPI application factory"""

from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from card_calendar.api.middleware import MetricsMiddleware, RequestIDMiddleware
from card_calendar.api.v1 import cards, reminders, snapshot
from card_calendar.config import Settings, settings
from card_calendar.domain.models import Card
from card_calendar.infrastructure.database.repositories import CardRepository
from card_calendar.infrastructure.database.session import build_engine, build_session_factory, create_tables
from card_calendar.infrastructure.notifications.base import NotificationSink
from card_calendar.infrastructure.notifications.sql import SqlNotificationSink
from card_calendar.infrastructure.observability.logging import setup_logging
from card_calendar.services.reminders import ReminderScheduler, policy_from_settings
from card_calendar.utils.clock import Clock, SystemClock

# Setup structured logging
setup_logging(settings.log_level)


def create_app(
    app_settings: Optional[Settings] = None,
    sink: Optional[NotificationSink] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Collaborators default to the SQL-backed sink and the system clock; tests
    pass their own. The authorization subscription is registered on startup
    and removed on shutdown.
    """
    app_settings = app_settings or settings
    engine = build_engine(app_settings.database_url)
    session_factory = build_session_factory(engine)
    sink = sink or SqlNotificationSink(session_factory, authorized=app_settings.notifications_authorized)
    clock = clock or SystemClock()
    scheduler = ReminderScheduler(sink, clock, policy_from_settings(app_settings))

    def load_cards() -> List[Card]:
        with session_factory() as db:
            return CardRepository(db).load()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        create_tables(engine)
        unsubscribe = sink.on_authorization_changed(
            lambda granted: scheduler.handle_authorization_change(granted, load_cards)
        )
        try:
            yield
        finally:
            unsubscribe()
            engine.dispose()

    app = FastAPI(
        title="Card Calendar",
        description="Credit card billing cycles and payment reminders",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.session_factory = session_factory
    app.state.sink = sink
    app.state.clock = clock
    app.state.scheduler = scheduler

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": app_settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(cards.router, prefix="/v1", tags=["cards"])
    app.include_router(snapshot.router, prefix="/v1", tags=["snapshot"])
    app.include_router(reminders.router, prefix="/v1", tags=["reminders"])

    return app


app = create_app()
