"""
Records and input DTOs for the leave ledger.

Input DTOs keep every field optional except the ones an operation truly needs;
the store resolves the gaps through the ``*_DEFAULTS`` tables below before a
record is built, so a stored record is never partially populated.
"""
import math
import time
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from leave_ledger.core import dates
from leave_ledger.core.config import settings
from leave_ledger.models.enums import LeaveStatus, LeaveType, Role

DEFAULT_ALLOWANCE_DAYS = 20.0
DEFAULT_CARRYOVER_DAYS = 0.0


def coerce_days(value: Any) -> Optional[float]:
    """Read a day count from a number or numeric text. Non-numeric or negative input gives None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return number


def _strip_blank(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


# --- Records ---

class Employee(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str
    team: str = "General"
    role: Role = Role.EMPLOYEE
    allowance_days: float = DEFAULT_ALLOWANCE_DAYS
    carryover_days: float = DEFAULT_CARRYOVER_DAYS
    timezone: str = "Europe/Paris"
    active: bool = True
    start_date: date = Field(default_factory=date.today)

    @field_validator("allowance_days", mode="before")
    @classmethod
    def _allowance(cls, v):
        days = coerce_days(v)
        return DEFAULT_ALLOWANCE_DAYS if days is None else days

    @field_validator("carryover_days", mode="before")
    @classmethod
    def _carryover(cls, v):
        days = coerce_days(v)
        return DEFAULT_CARRYOVER_DAYS if days is None else days

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class LeaveRequest(BaseModel):
    id: str
    employee_id: str
    start_date: date
    end_date: date
    type: LeaveType = LeaveType.ANNUAL
    status: LeaveStatus = LeaveStatus.APPROVED
    notes: str = ""

    @field_validator("notes", mode="before")
    @classmethod
    def _notes(cls, v):
        return v or ""

    @model_validator(mode="after")
    def _ordered(self):
        self.start_date, self.end_date = dates.normalize(self.start_date, self.end_date)
        return self

    @property
    def days(self) -> int:
        return dates.duration(self.start_date, self.end_date)


class Holiday(BaseModel):
    id: str
    region: str
    date: date
    name: str


class LedgerState(BaseModel):
    """The full dataset as held by the snapshot backend."""
    employees: List[Employee] = []
    holidays: List[Holiday] = []
    vacations: List[LeaveRequest] = []


# --- Inputs ---

EMPLOYEE_DEFAULTS: Dict[str, Callable[[], Any]] = {
    "first_name": lambda: "Nouveau",
    "last_name": lambda: "Collaborateur",
    "email": lambda: f"collaborateur-{int(time.time() * 1000)}@exemple.com",
    "team": lambda: "General",
    "role": lambda: Role.EMPLOYEE,
    "allowance_days": lambda: DEFAULT_ALLOWANCE_DAYS,
    "carryover_days": lambda: DEFAULT_CARRYOVER_DAYS,
    "timezone": lambda: "Europe/Paris",
    "active": lambda: True,
    "start_date": date.today,
}

LEAVE_REQUEST_DEFAULTS: Dict[str, Callable[[], Any]] = {
    "type": lambda: LeaveType.ANNUAL,
    "status": lambda: LeaveStatus.APPROVED,
    "notes": lambda: "",
}

HOLIDAY_DEFAULTS: Dict[str, Callable[[], Any]] = {
    "region": lambda: settings.holiday_region,
}


def resolve_defaults(payload: BaseModel, defaults: Dict[str, Callable[[], Any]]) -> Dict[str, Any]:
    values = payload.model_dump()
    for field, factory in defaults.items():
        if values.get(field) is None:
            values[field] = factory()
    return values


class EmployeeCreate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    team: Optional[str] = None
    role: Optional[Role] = None
    allowance_days: Optional[float] = None
    carryover_days: Optional[float] = None
    timezone: Optional[str] = None
    active: Optional[bool] = None
    start_date: Optional[date] = None

    @field_validator("first_name", "last_name", "email", "team", "role", "timezone", "start_date", mode="before")
    @classmethod
    def _blank_is_absent(cls, v):
        return _strip_blank(v)

    @field_validator("allowance_days", "carryover_days", mode="before")
    @classmethod
    def _days(cls, v):
        return coerce_days(v)


class LeaveRequestCreate(BaseModel):
    employee_id: str
    start_date: date
    end_date: Optional[date] = None
    type: Optional[LeaveType] = None
    status: Optional[LeaveStatus] = None
    notes: Optional[str] = None

    @field_validator("employee_id", mode="before")
    @classmethod
    def _employee_ref(cls, v):
        v = _strip_blank(v)
        if v is None:
            raise ValueError("employee_id is required")
        return v

    @field_validator("end_date", "type", "status", mode="before")
    @classmethod
    def _blank_is_absent(cls, v):
        return _strip_blank(v)


class LeaveRequestUpdate(BaseModel):
    employee_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    type: Optional[LeaveType] = None
    status: Optional[LeaveStatus] = None
    notes: Optional[str] = None

    @field_validator("employee_id", "start_date", "end_date", "type", "status", mode="before")
    @classmethod
    def _blank_is_absent(cls, v):
        return _strip_blank(v)

    def changes(self) -> Dict[str, Any]:
        """Fields the caller actually supplied. An explicit null only clears notes."""
        supplied = self.model_dump(exclude_unset=True)
        if "notes" in supplied and supplied["notes"] is None:
            supplied["notes"] = ""
        return {k: v for k, v in supplied.items() if v is not None}


class HolidayCreate(BaseModel):
    region: Optional[str] = None
    date: date
    name: str

    @field_validator("region", mode="before")
    @classmethod
    def _blank_is_absent(cls, v):
        return _strip_blank(v)

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        v = _strip_blank(v)
        if v is None:
            raise ValueError("name is required")
        return v


# --- Filters ---

class LeaveFilter(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    employee_id: Optional[str] = Field(default=None, alias="employeeId")
    type: Optional[LeaveType] = None
    status: Optional[LeaveStatus] = None
    from_date: Optional[date] = Field(default=None, alias="from")
    to_date: Optional[date] = Field(default=None, alias="to")

    def matches(self, request: LeaveRequest) -> bool:
        if self.employee_id and request.employee_id != self.employee_id:
            return False
        if self.type and request.type != self.type:
            return False
        if self.status and request.status != self.status:
            return False
        return dates.overlaps(request.start_date, request.end_date, self.from_date, self.to_date)


class HolidayFilter(BaseModel):
    model_config = ConfigDict(extra="forbid")

    region: Optional[str] = None
    year: Optional[int] = Field(default=None, ge=1, le=9999)

    def matches(self, holiday: Holiday) -> bool:
        if self.region and holiday.region != self.region:
            return False
        if self.year and holiday.date.year != self.year:
            return False
        return True


# --- Reports ---

class ReportEmployee(BaseModel):
    id: str
    name: str
    email: str
    allowance: float
    carryover: float


class Report(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    employee: ReportEmployee
    year: int
    days_taken: int = Field(alias="daysTaken")
    remaining: float
    by_type: Dict[LeaveType, int] = Field(default_factory=dict, alias="byType")
    vacations: List[LeaveRequest] = []


class DashboardSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    today: date
    employee_count: int = Field(alias="employeeCount")
    off_today: List[LeaveRequest] = Field(default_factory=list, alias="offToday")
    upcoming_holidays: List[Holiday] = Field(default_factory=list, alias="upcomingHolidays")
