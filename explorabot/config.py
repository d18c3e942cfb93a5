"""
Application configuration — reads all settings from environment variables.
"""

import sys

from loguru import logger
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ──────────────────────────────────────────────
    APP_NAME: str = "EXPLORABOT"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    CORS_ORIGINS: str = "*"
    LOG_LEVEL: str = ""

    # ── Limits ───────────────────────────────────────────
    MAX_REQUEST_BODY_SIZE: int = 1024 * 1024
    MAX_MESSAGE_LENGTH: int = 10000
    MAX_WS_MESSAGE_SIZE: int = 100000
    MAX_SESSIONS: int = 1000

    # ── WebSocket ────────────────────────────────────────
    HEARTBEAT_INTERVAL: float = 30.0

    # ── Rate Limiting ────────────────────────────────────
    RATE_LIMIT_PER_MINUTE: int = 60

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def debug_mode(self) -> bool:
        return self.DEBUG or self.ENVIRONMENT == "development"

    @property
    def cors_origins(self) -> list[str]:
        if self.CORS_ORIGINS == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()


def setup_logging(cfg: Settings = settings) -> None:
    """Route loguru output to stderr at the configured level."""
    level = cfg.LOG_LEVEL.upper() or ("DEBUG" if cfg.debug_mode else "INFO")
    logger.remove()
    logger.add(sys.stderr, level=level)
