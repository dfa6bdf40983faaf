from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "contract-events"
    version: str = "0.1.0"
    DEBUG: bool = False
    APP_DOMAIN: str = "example.com"
    APP_DATABASE_DSN: str = "sqlite:////tmp/contract_events.db"
    REDIS_URL: str = "redis://localhost:6379"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Currency used when contract terms do not carry one
    DEFAULT_CURRENCY: str = "USD"

    # Status configuration seed (empty = packaged default_event_statuses.json)
    EVENT_STATUS_SEED_PATH: str = ""

    # Overdue cache refresh cadence for the worker
    OVERDUE_REFRESH_MINUTES: int = 15

    @property
    def overdue_refresh_minutes(self) -> set[int]:
        step = max(1, min(self.OVERDUE_REFRESH_MINUTES, 60))
        return set(range(0, 60, step))


settings = Settings()
