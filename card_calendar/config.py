"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CARD_CALENDAR_",
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite:///./card_calendar.db"

    # Service
    service_name: str = "card-calendar"
    log_level: str = "INFO"

    # Reminders
    payment_reminder_days_before: int = 3
    payment_reminder_hour: int = 9
    payment_reminder_minute: int = 0
    cut_reminder_hour: int = 9
    cut_reminder_minute: int = 0

    # Initial notification permission state of the sink
    notifications_authorized: bool = False

    # Queries
    due_soon_window_days: int = 7


settings = Settings()
