import logging
from datetime import date
from typing import Dict, List, Optional

from leave_ledger.core import dates
from leave_ledger.models.enums import LeaveStatus, LeaveType
from leave_ledger.schemas.ledger import (
    DashboardSummary,
    HolidayFilter,
    LeaveFilter,
    LeaveRequest,
    Report,
    ReportEmployee,
)
from leave_ledger.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)

UPCOMING_HOLIDAY_LIMIT = 5


class ReportService:
    """
    Annual usage reporting composed from ledger queries. Holds no state of its
    own, so every figure can be re-derived from the employee and leave records.
    """

    def __init__(self, ledger: LedgerStore):
        self.ledger = ledger

    def compute_report(self, employee_id: str, year: Optional[int] = None) -> Optional[Report]:
        """
        Per-employee usage for one calendar year, or None if the employee doesn't exist.

        Only APPROVED requests count, and a request belongs entirely to the year
        it starts in, even when it runs into the next one.
        """
        employee = self.ledger.get_employee(employee_id)
        if employee is None:
            return None

        year = int(year) if year else date.today().year
        approved = self.ledger.list_leave_requests(
            LeaveFilter(employee_id=employee_id, status=LeaveStatus.APPROVED)
        )
        kept: List[LeaveRequest] = [r for r in approved if r.start_date.year == year]

        days_taken = 0
        by_type: Dict[LeaveType, int] = {}
        for request in kept:
            days = dates.duration(request.start_date, request.end_date)
            days_taken += days
            by_type[request.type] = by_type.get(request.type, 0) + days

        allowance = employee.allowance_days + employee.carryover_days
        remaining = max(allowance - days_taken, 0)

        return Report(
            employee=ReportEmployee(
                id=employee.id,
                name=employee.full_name,
                email=employee.email,
                allowance=allowance,
                carryover=employee.carryover_days,
            ),
            year=year,
            days_taken=days_taken,
            remaining=remaining,
            by_type=by_type,
            vacations=kept,
        )

    def dashboard(self, today: Optional[date] = None, region: Optional[str] = None) -> DashboardSummary:
        """Headcount, who is off on ``today``, and the next holidays left in this year."""
        today = today or date.today()
        employees = self.ledger.list_employees()
        off_today = self.ledger.list_leave_requests(LeaveFilter(from_date=today, to_date=today))
        holidays = self.ledger.list_holidays(HolidayFilter(region=region, year=today.year))
        upcoming = [h for h in holidays if h.date >= today][:UPCOMING_HOLIDAY_LIMIT]

        return DashboardSummary(
            today=today,
            employee_count=len(employees),
            off_today=off_today,
            upcoming_holidays=upcoming,
        )
