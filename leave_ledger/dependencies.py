"""
Ledger construction and FastAPI dependency providers.

The backend is chosen once from configuration when the application starts
and the same instance is handed to every request.
"""
import logging

from fastapi import Depends, Request
from sqlalchemy.orm import sessionmaker

from leave_ledger.core.config import Config
from leave_ledger.services.ledger_store import LedgerStore
from leave_ledger.services.local_ledger import LocalSnapshotLedger
from leave_ledger.services.remote_ledger import RemoteLedger
from leave_ledger.services.report import ReportService
from leave_ledger.services.snapshot_storage import SnapshotStorage

logger = logging.getLogger(__name__)


def build_ledger(config: Config, session_factory: sessionmaker = None) -> LedgerStore:
    """
    Select and construct the ledger backend.

    Raises:
        RuntimeError: If the remote backend is requested but not configured.
    """
    if config.ledger_backend == "remote":
        if not config.remote.configured:
            raise RuntimeError(
                "LEDGER_BACKEND=remote requires LEDGER_REMOTE_URL and LEDGER_REMOTE_KEY to be set."
            )
        logger.info(f"Using remote ledger at {config.remote.url}")
        return RemoteLedger(config.remote.url, config.remote.api_key, timeout=config.remote.timeout)

    if session_factory is None:
        from leave_ledger.database import SessionLocal, init_db
        init_db()
        session_factory = SessionLocal
    logger.info(f"Using snapshot ledger (key '{config.snapshot_key}')")
    return LocalSnapshotLedger(SnapshotStorage(session_factory, config.snapshot_key))


def get_ledger(request: Request) -> LedgerStore:
    return request.app.state.ledger


def get_report_service(ledger: LedgerStore = Depends(get_ledger)) -> ReportService:
    return ReportService(ledger)


__all__ = [
    "build_ledger",
    "get_ledger",
    "get_report_service",
]
