# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import snapshot

from .enums import LeaveStatus, LeaveType, Role
from .snapshot import LedgerSnapshot

__all__ = [
    "LedgerSnapshot",
    "LeaveStatus",
    "LeaveType",
    "Role",
]
