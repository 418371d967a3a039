import os
import logging
from pydantic import BaseModel, Field
from typing import List
from dotenv import load_dotenv

load_dotenv()


class LeaveAllotments(BaseModel):
    """Default yearly totals used when a leave balance row is first created."""
    casual: float = Field(default=float(os.getenv("LEAVE_CASUAL_DAYS", "12")), ge=0)
    sick: float = Field(default=float(os.getenv("LEAVE_SICK_DAYS", "12")), ge=0)
    annual: float = Field(default=float(os.getenv("LEAVE_ANNUAL_DAYS", "15")), ge=0)


class Config(BaseModel):
    app_name: str = "HR Desk"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"
    version: str = "1.0.0"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./hrdesk.db")

    # Leave policy
    leave_allotments: LeaveAllotments = LeaveAllotments()

    # Listing
    default_page_size: int = 10
    max_page_size: int = 100

    request_id_header: str = "X-Request-ID"

    # CORS: comma-separated origins loaded from env.
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:5173,http://localhost:3000,"
                "http://127.0.0.1:5173,http://127.0.0.1:3000",
            ).split(",")
            if o.strip()
        ]
    )

    # Rate limiting
    enable_rate_limiting: bool = os.getenv("ENABLE_RATE_LIMITING", "true").lower() == "true"
    rate_limit_per_minute: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))


settings = Config()

_logger = logging.getLogger(__name__)
if settings.environment == "production" and settings.database_url.startswith("sqlite"):
    _logger.warning("⚠ Running production with SQLite; use PostgreSQL for concurrent writers.")
