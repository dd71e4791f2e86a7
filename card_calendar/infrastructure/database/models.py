"""SQLAlchemy ORM models for cards and pending reminders"""

from sqlalchemy import Column, DateTime, Integer, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class CardRecord(Base):
    """Stored credit card with its billing profile"""

    __tablename__ = "credit_card"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    cut_day = Column(Integer, nullable=False)
    payment_days = Column(Integer, nullable=False)
    color_tag = Column(Text, nullable=False)
    last_updated = Column(DateTime, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class PendingReminderRecord(Base):
    """Reminder waiting to fire; one row per (card, kind) key"""

    __tablename__ = "pending_reminder"

    key = Column(Text, primary_key=True)
    card_id = Column(Text, nullable=False, index=True)
    kind = Column(Text, nullable=False)
    fire_at = Column(DateTime, nullable=False)
    title = Column(Text, nullable=False, default="")
    body = Column(Text, nullable=False, default="")
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
