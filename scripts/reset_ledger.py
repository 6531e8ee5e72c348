"""
Reset the snapshot ledger to the default seed dataset.

Usage: python -m scripts.reset_ledger
"""
from leave_ledger.core.config import settings
from leave_ledger.core.logging import setup_logging
from leave_ledger.database import SessionLocal, init_db
from leave_ledger.services.local_ledger import LocalSnapshotLedger
from leave_ledger.services.snapshot_storage import SnapshotStorage


def reset():
    if settings.ledger_backend != "local":
        print("LEDGER_BACKEND is not 'local'; the remote dataset is managed by its own server.")
        return
    init_db()
    ledger = LocalSnapshotLedger(SnapshotStorage(SessionLocal, settings.snapshot_key))
    ledger.reset()
    employees = ledger.list_employees()
    print(f"Snapshot '{settings.snapshot_key}' reset: {len(employees)} employees, "
          f"{len(ledger.state.vacations)} leave requests, {len(ledger.state.holidays)} holidays")


if __name__ == "__main__":
    setup_logging()
    reset()
