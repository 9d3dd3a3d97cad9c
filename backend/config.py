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


@dataclass(frozen=True)
class Settings:
    billing_api_url: str = _require_env("BILLING_API_URL").rstrip("/")
    billing_api_token: str | None = os.getenv("BILLING_API_TOKEN")
    billing_api_timeout_seconds: float = float(
        os.getenv("BILLING_API_TIMEOUT_SECONDS", "10")
    )
    unbilled_payment_mode: str = os.getenv("UNBILLED_PAYMENT_MODE", "Unbilled")
    billed_report_path: str = os.getenv("BILLED_REPORT_PATH", "/print-report")
    display_timezone: str = os.getenv("DISPLAY_TIMEZONE", "UTC")
    supabase_url: str | None = os.getenv("SUPABASE_URL")
    supabase_service_role_key: str | None = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    allowed_origins: List[str] = field(
        default_factory=lambda: _get_list("ALLOWED_ORIGINS", "*")
    )

    @property
    def audit_enabled(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)


settings = Settings()
