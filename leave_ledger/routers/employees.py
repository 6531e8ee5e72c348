from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from leave_ledger.core.exceptions import NotFoundError
from leave_ledger.dependencies import get_ledger, get_report_service
from leave_ledger.schemas.ledger import Employee, EmployeeCreate, Report
from leave_ledger.services.ledger_store import LedgerStore
from leave_ledger.services.report import ReportService
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("", response_model=List[Employee])
def list_employees(ledger: LedgerStore = Depends(get_ledger)):
    return ledger.list_employees()


@router.post("", response_model=Employee, status_code=201)
def create_employee(payload: EmployeeCreate, ledger: LedgerStore = Depends(get_ledger)):
    return ledger.create_employee(payload)


@router.get("/{employee_id}", response_model=Employee)
def get_employee(employee_id: str, ledger: LedgerStore = Depends(get_ledger)):
    return ledger.require_employee(employee_id)


@router.delete("/{employee_id}")
def delete_employee(
    employee_id: str,
    cascade: bool = Query(False, description="Also delete the employee's leave requests"),
    ledger: LedgerStore = Depends(get_ledger),
):
    if not ledger.delete_employee(employee_id, cascade=cascade):
        raise NotFoundError("Employee", employee_id)
    return {"message": "Employee deleted", "cascade": cascade}


@router.get("/{employee_id}/report", response_model=Report)
def get_report(
    employee_id: str,
    year: Optional[int] = Query(None, ge=1, le=9999),
    reports: ReportService = Depends(get_report_service),
):
    report = reports.compute_report(employee_id, year)
    if report is None:
        raise NotFoundError("Employee", employee_id)
    return report
