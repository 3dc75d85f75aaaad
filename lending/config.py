# lending/config.py
import logging
import os
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _split_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


@dataclass
class Settings:
    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///library.db")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # API
    api_host: str = os.getenv("API_HOST", "127.0.0.1")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: List[str] = field(default_factory=lambda: _split_origins(
        os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:4200,http://localhost:8080")
    ))

    # Lending rules
    max_renewals: int = int(os.getenv("MAX_RENEWALS", "2"))
    due_soon_days: int = int(os.getenv("DUE_SOON_DAYS", "3"))
    low_availability_threshold: int = int(os.getenv("LOW_AVAILABILITY_THRESHOLD", "5"))


settings = Settings()


def configure_logging(level: str = None) -> None:
    """Configure root logging for the API and CLI entry points"""
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper(), logging.INFO),
        format=LOG_FORMAT,
    )
