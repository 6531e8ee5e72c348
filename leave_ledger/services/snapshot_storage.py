import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from leave_ledger.core.exceptions import BackendError
from leave_ledger.models.snapshot import LedgerSnapshot

logger = logging.getLogger(__name__)


class SnapshotStorage:
    """
    Key-value substrate for the snapshot backend: one row holds one dataset.
    Writes replace the whole blob; there is no field-level write.
    """

    def __init__(self, session_factory: sessionmaker, key: str):
        self.session_factory = session_factory
        self.key = key

    def read(self) -> Optional[str]:
        """Raw stored blob, or None if nothing has been written yet. Storage errors propagate."""
        db: Session = self.session_factory()
        try:
            row = db.get(LedgerSnapshot, self.key)
            return row.payload if row else None
        finally:
            db.close()

    def write(self, payload: str) -> None:
        db: Session = self.session_factory()
        try:
            row = db.get(LedgerSnapshot, self.key)
            if row is None:
                db.add(LedgerSnapshot(key=self.key, payload=payload))
            else:
                row.payload = payload
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to persist ledger snapshot '{self.key}': {e}", exc_info=True)
            raise BackendError("Could not save the ledger snapshot.", details={"key": self.key}) from e
        finally:
            db.close()
