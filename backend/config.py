import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent / ".env")


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _get_list(name: str, fallback: str = "") -> List[str]:
    raw_value = os.getenv(name, fallback)
    if not raw_value:
        return []
    return [item.strip() for item in raw_value.split(",") if item.strip()]


def _get_bool(name: str, fallback: bool) -> bool:
    raw_value = os.getenv(name)
    if raw_value is None or raw_value == "":
        return fallback
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    supabase_url: str = _require_env("SUPABASE_URL")
    supabase_service_role_key: str = _require_env("SUPABASE_SERVICE_ROLE_KEY")
    encryption_key: str = _require_env("ENCRYPTION_KEY")
    mobile_order_api_url: str = os.getenv(
        "MOBILE_ORDER_API_URL", "https://mobileorderprodapi.transactcampus.com"
    )
    mobile_order_idp_url: str = os.getenv(
        "MOBILE_ORDER_IDP_URL", "https://login.scu.edu"
    )
    mobile_order_campus_id: str = os.getenv("MOBILE_ORDER_CAMPUS_ID", "4")
    mobile_order_secret_key: str = os.getenv(
        "MOBILE_ORDER_SECRET_KEY", "dFz9Dq435BT3xCVU2PCy"
    )
    mobile_order_http_timeout_seconds: float = float(
        os.getenv("MOBILE_ORDER_HTTP_TIMEOUT_SECONDS", "30")
    )
    order_poll_interval_seconds: float = float(
        os.getenv("ORDER_POLL_INTERVAL_SECONDS", "10")
    )
    order_poll_max_attempts: int = int(os.getenv("ORDER_POLL_MAX_ATTEMPTS", "30"))
    order_poll_max_errors: int = int(os.getenv("ORDER_POLL_MAX_ERRORS", "5"))
    scheduler_interval_seconds: int = int(
        os.getenv("SCHEDULER_INTERVAL_SECONDS", "60")
    )
    scheduler_lookahead_seconds: int = int(
        os.getenv("SCHEDULER_LOOKAHEAD_SECONDS", "300")
    )
    scheduler_autostart: bool = _get_bool("SCHEDULER_AUTOSTART", True)
    user_email_domain: str = os.getenv("USER_EMAIL_DOMAIN", "scu.edu")
    allowed_origins: List[str] = field(
        default_factory=lambda: _get_list("ALLOWED_ORIGINS", "*")
    )


settings = Settings()
