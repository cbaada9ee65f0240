from __future__ import annotations

from typing import Literal

from pydantic import ConfigDict
from pydantic_settings import BaseSettings

from pairchat.domain.value_objects.enums import PairingMode


class Settings(BaseSettings):
    POSTGRES_USER: str
    POSTGRES_PASSWORD: str
    POSTGRES_DB: str
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432

    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_RECYCLE: int = 300

    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_CONNECT_ATTEMPTS: int = 30
    REDIS_CONNECT_DELAY_SECONDS: float = 2.0

    JWT_SECRET: str = ""
    JWT_VERIFY_MODE: Literal["hs256", "jwks"] = "hs256"
    JWT_ALGORITHM: str = "HS256"
    JWKS_URL: str | None = None
    JWT_LEEWAY_SECONDS: int = 30

    CORS_ORIGINS: list[str] = ["*"]

    WS_HEARTBEAT_SECONDS: int = 30

    PRESENCE_BACKEND: Literal["redis", "memory"] = "redis"
    PRESENCE_KEY: str = "online_users"

    # Background pipeline (planner, queuer, consumer, cleanup)
    WORKERS_ENABLED: bool = True
    SCHEDULER_TIMEZONE: str = "Europe/Istanbul"

    PLANNER_HOUR: int = 2
    PLANNER_MINUTE: int = 0
    PLANNER_ACTIVE_WINDOW_DAYS: int = 30
    PLANNER_SEND_WINDOW_HOURS: int = 24
    PLANNER_PAIRING: PairingMode = PairingMode.DISJOINT

    QUEUER_INTERVAL_SECONDS: float = 60.0
    QUEUER_BATCH_SIZE: int = 100

    DRAFT_QUEUE_STREAM: str = "message_sending_queue"
    DRAFT_QUEUE_GROUP: str = "draft-consumers"
    DRAFT_DEAD_LETTER_STREAM: str = "message_sending_queue.dead"
    DRAFT_CONSUMER_NAME: str = ""
    DRAFT_CONSUMER_BLOCK_MS: int = 5000
    DRAFT_MAX_ATTEMPTS: int = 5
    DRAFT_RETRY_DELAY_SECONDS: float = 2.0

    CLEANUP_HOUR: int = 3
    CLEANUP_MINUTE: int = 0
    CLEANUP_RETENTION_DAYS: int = 7

    @property
    def database_url(self) -> str:
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.POSTGRES_DB}"
        )

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()  # type: ignore[call-arg]
