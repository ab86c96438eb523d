"""Application configuration."""

from datetime import time
from decimal import Decimal
from os import getenv

from pydantic import BaseModel


class Settings(BaseModel):
    """Runtime settings for the application."""

    app_name: str = "bistro API"
    app_env: str = getenv("APP_ENV", "dev")
    debug: bool = getenv("DEBUG", "0") == "1"
    log_level: str = getenv("LOG_LEVEL", "INFO")
    database_url: str = getenv("DATABASE_URL", "sqlite:///./bistro.db")
    default_delivery_fee: Decimal = Decimal(getenv("DEFAULT_DELIVERY_FEE", "5.00"))
    order_no_prefix: str = getenv("ORDER_NO_PREFIX", "ORD-A-")
    order_max_payload_bytes: int = int(getenv("ORDER_MAX_PAYLOAD_BYTES", "65536"))
    idempotency_ttl_seconds: int = int(getenv("IDEMPOTENCY_TTL_SECONDS", "600"))
    reservation_duration_minutes: int = int(getenv("RESERVATION_DURATION_MINUTES", "30"))
    reservation_first_slot: time = time.fromisoformat(getenv("RESERVATION_FIRST_SLOT", "14:00"))
    reservation_last_slot: time = time.fromisoformat(getenv("RESERVATION_LAST_SLOT", "22:30"))
    seed_tables: bool = getenv("SEED_TABLES", "1") == "1"


settings: Settings = Settings()
