from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from leave_ledger.database import Base

class LedgerSnapshot(Base):
    """One row per dataset: the whole ledger serialised as a single JSON blob."""
    __tablename__ = "ledger_snapshots"

    key = Column(String, primary_key=True, index=True)
    payload = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
