from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from leave_ledger.core.exceptions import NotFoundError
from leave_ledger.dependencies import get_ledger
from leave_ledger.schemas.ledger import Holiday, HolidayCreate, HolidayFilter
from leave_ledger.services.ledger_store import LedgerStore

router = APIRouter(prefix="/holidays", tags=["holidays"])


@router.get("", response_model=List[Holiday])
def list_holidays(
    region: Optional[str] = None,
    year: Optional[int] = Query(None, ge=1, le=9999),
    ledger: LedgerStore = Depends(get_ledger),
):
    return ledger.list_holidays(HolidayFilter(region=region, year=year))


@router.post("", response_model=Holiday, status_code=201)
def create_holiday(payload: HolidayCreate, ledger: LedgerStore = Depends(get_ledger)):
    return ledger.create_holiday(payload)


@router.delete("/{holiday_id}")
def delete_holiday(holiday_id: str, ledger: LedgerStore = Depends(get_ledger)):
    if not ledger.delete_holiday(holiday_id):
        raise NotFoundError("Holiday", holiday_id)
    return {"message": "Holiday deleted"}
