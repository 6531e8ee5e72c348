from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from leave_ledger.core.exceptions import NotFoundError
from leave_ledger.dependencies import get_ledger
from leave_ledger.models.enums import LeaveStatus, LeaveType
from leave_ledger.schemas.ledger import LeaveFilter, LeaveRequest, LeaveRequestCreate, LeaveRequestUpdate
from leave_ledger.services.ledger_store import LedgerStore

router = APIRouter(prefix="/leave-requests", tags=["leave"])


@router.get("", response_model=List[LeaveRequest])
def list_leave_requests(
    employee_id: Optional[str] = Query(None, alias="employeeId"),
    leave_type: Optional[LeaveType] = Query(None, alias="type"),
    status: Optional[LeaveStatus] = None,
    from_date: Optional[date] = Query(None, alias="from"),
    to_date: Optional[date] = Query(None, alias="to"),
    ledger: LedgerStore = Depends(get_ledger),
):
    filters = LeaveFilter(
        employee_id=employee_id,
        type=leave_type,
        status=status,
        from_date=from_date,
        to_date=to_date,
    )
    return ledger.list_leave_requests(filters)


@router.post("", response_model=LeaveRequest, status_code=201)
def create_leave_request(payload: LeaveRequestCreate, ledger: LedgerStore = Depends(get_ledger)):
    return ledger.create_leave_request(payload)


@router.get("/{request_id}", response_model=LeaveRequest)
def get_leave_request(request_id: str, ledger: LedgerStore = Depends(get_ledger)):
    request = ledger.get_leave_request(request_id)
    if request is None:
        raise NotFoundError("Leave request", request_id)
    return request


@router.patch("/{request_id}", response_model=LeaveRequest)
def update_leave_request(
    request_id: str, patch: LeaveRequestUpdate, ledger: LedgerStore = Depends(get_ledger)
):
    updated = ledger.update_leave_request(request_id, patch)
    if updated is None:
        raise NotFoundError("Leave request", request_id)
    return updated


@router.delete("/{request_id}")
def delete_leave_request(request_id: str, ledger: LedgerStore = Depends(get_ledger)):
    if not ledger.delete_leave_request(request_id):
        raise NotFoundError("Leave request", request_id)
    return {"message": "Leave request deleted"}
