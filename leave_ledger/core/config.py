import os
import logging
from pydantic import BaseModel, Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


def _default_backend() -> str:
    explicit = os.getenv("LEDGER_BACKEND")
    if explicit:
        return explicit.strip().lower()
    if os.getenv("LEDGER_REMOTE_URL") and os.getenv("LEDGER_REMOTE_KEY"):
        return "remote"
    return "local"


class RemoteSettings(BaseModel):
    url: Optional[str] = Field(default=os.getenv("LEDGER_REMOTE_URL"))
    api_key: Optional[str] = Field(default=os.getenv("LEDGER_REMOTE_KEY"))
    timeout: float = Field(default=float(os.getenv("LEDGER_REMOTE_TIMEOUT", "10")))

    @property
    def configured(self) -> bool:
        return bool(self.url and self.api_key)


class Config(BaseModel):
    app_name: str = "Leave Ledger"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"
    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    # Ledger backend: "local" (snapshot) or "remote"
    ledger_backend: str = Field(default_factory=_default_backend)
    remote: RemoteSettings = RemoteSettings()

    # Snapshot storage substrate
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./ledger.db")
    snapshot_key: str = os.getenv("LEDGER_SNAPSHOT_KEY", "vacation-tracker-data")

    holiday_region: str = os.getenv("HOLIDAY_REGION", "US")

    # CORS: comma-separated origins loaded from env.
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:5173,http://127.0.0.1:5173,"
                "http://localhost:3000,http://127.0.0.1:3000",
            ).split(",")
            if o.strip()
        ]
    )

settings = Config()

_logger = logging.getLogger(__name__)
if settings.ledger_backend not in ("local", "remote"):
    raise RuntimeError(
        f"FATAL: LEDGER_BACKEND must be 'local' or 'remote', got '{settings.ledger_backend}'."
    )
if settings.ledger_backend == "local" and settings.remote.configured:
    _logger.warning("Remote ledger is configured but LEDGER_BACKEND=local; using the snapshot backend.")
