from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends
from leave_ledger.dependencies import get_report_service
from leave_ledger.schemas.ledger import DashboardSummary
from leave_ledger.services.report import ReportService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardSummary)
def get_dashboard(
    today: Optional[date] = None,
    region: Optional[str] = None,
    reports: ReportService = Depends(get_report_service),
):
    """Headcount, who is off today and upcoming holidays."""
    return reports.dashboard(today=today, region=region)
