"""Runtime settings read from the environment (and ``.env`` via python-dotenv)."""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

PACKAGE_DIR = Path(__file__).resolve().parents[1]

SERVER_KEY_PREFIXES = ("Mid-server-", "SB-Mid-server-")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_optional(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip().strip("'\"")
    return value or None


@dataclass
class Settings:
    database_url: str = field(
        default_factory=lambda: os.getenv(
            "DATABASE_URL", f"sqlite+aiosqlite:///{PACKAGE_DIR / 'db' / 'database.db'}"
        )
    )
    db_auto_create: bool = field(default_factory=lambda: _env_flag("DB_AUTO_CREATE", "true"))

    admin_password: Optional[str] = field(default_factory=lambda: _env_optional("ADMIN_PASSWORD"))

    midtrans_server_key: Optional[str] = field(
        default_factory=lambda: _env_optional("MIDTRANS_SERVER_KEY")
    )
    midtrans_verify_signature: bool = field(
        default_factory=lambda: _env_flag("MIDTRANS_VERIFY_SIGNATURE", "false")
    )
    # Where Midtrans sends the donor back after payment; request origin otherwise
    site_url: Optional[str] = field(default_factory=lambda: _env_optional("SITE_URL"))
    donations_open: bool = field(default_factory=lambda: _env_flag("DONATIONS_OPEN", "true"))

    upload_dir: str = field(
        default_factory=lambda: os.getenv("UPLOAD_DIR", str(PACKAGE_DIR.parent / "uploads"))
    )
    public_files_base_url: Optional[str] = field(
        default_factory=lambda: _env_optional("PUBLIC_FILES_BASE_URL")
    )

    grafana_otlp_endpoint: Optional[str] = field(
        default_factory=lambda: _env_optional("GRAFANA_OTLP_ENDPOINT")
    )
    grafana_otlp_auth: Optional[str] = field(
        default_factory=lambda: _env_optional("GRAFANA_OTLP_AUTH")
    )
    service_name: str = field(default_factory=lambda: os.getenv("SERVICE_NAME", "gdg-donation-api"))
    service_version: str = field(default_factory=lambda: os.getenv("SERVICE_VERSION", "1.0.0"))
    environment: str = field(default_factory=lambda: os.getenv("ENVIRONMENT", "production"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def log_sink_enabled(self) -> bool:
        return bool(self.grafana_otlp_endpoint and self.grafana_otlp_auth)


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def validate_settings(settings: Settings) -> Tuple[List[str], List[str]]:
    """Return ``(missing, errors)`` for the configuration.

    Nothing here is fatal: the app still starts so public read-only
    endpoints keep working while the operator fixes the environment.
    """
    missing = []
    errors = []

    if not settings.midtrans_server_key:
        missing.append("MIDTRANS_SERVER_KEY")
    if not settings.admin_password:
        missing.append("ADMIN_PASSWORD")

    if settings.midtrans_server_key and not settings.midtrans_server_key.startswith(
        SERVER_KEY_PREFIXES
    ):
        errors.append(
            "MIDTRANS_SERVER_KEY appears to be invalid "
            "(should start with 'Mid-server-' or 'SB-Mid-server-')"
        )

    if settings.grafana_otlp_endpoint and not settings.grafana_otlp_auth:
        errors.append("GRAFANA_OTLP_AUTH is required when GRAFANA_OTLP_ENDPOINT is set")

    return missing, errors
