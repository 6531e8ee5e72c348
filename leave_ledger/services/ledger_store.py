"""
Ledger store interface and the record-building rules shared by both backends.
"""
import unicodedata
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from leave_ledger.core import dates
from leave_ledger.core.exceptions import NotFoundError, StaleQueryError, ValidationError
from leave_ledger.core.ids import new_id
from leave_ledger.schemas.ledger import (
    EMPLOYEE_DEFAULTS,
    HOLIDAY_DEFAULTS,
    LEAVE_REQUEST_DEFAULTS,
    Employee,
    EmployeeCreate,
    Holiday,
    HolidayCreate,
    HolidayFilter,
    LeaveFilter,
    LeaveRequest,
    LeaveRequestCreate,
    LeaveRequestUpdate,
    resolve_defaults,
)
from leave_ledger.services.query_guard import QueryTicket

M = TypeVar("M", bound=BaseModel)
Payload = Union[BaseModel, Mapping[str, Any], None]


def validate_input(model: Type[M], fields: Payload) -> M:
    """Turn a loose payload into ``model``, raising our ValidationError instead of pydantic's."""
    if isinstance(fields, model):
        return fields
    if isinstance(fields, BaseModel):
        fields = fields.model_dump(exclude_unset=True)
    try:
        return model.model_validate(dict(fields or {}))
    except PydanticValidationError as e:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]) or "payload", "msg": err["msg"]}
            for err in e.errors()
        ]
        raise ValidationError(f"Invalid {model.__name__}", details={"errors": errors}) from e


def collation_key(value: str) -> str:
    """Accent- and case-insensitive sort key, so 'Élodie' sorts next to 'Elodie'."""
    decomposed = unicodedata.normalize("NFKD", value or "")
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def sort_employees(employees: List[Employee]) -> List[Employee]:
    return sorted(employees, key=lambda e: (collation_key(e.first_name), collation_key(e.last_name)))


def sort_leave_requests(requests: List[LeaveRequest]) -> List[LeaveRequest]:
    return sorted(requests, key=lambda r: r.start_date)


def sort_holidays(holidays: List[Holiday]) -> List[Holiday]:
    return sorted(holidays, key=lambda h: h.date)


def build_employee(fields: Payload) -> Employee:
    payload = validate_input(EmployeeCreate, fields)
    return Employee(id=new_id(), **resolve_defaults(payload, EMPLOYEE_DEFAULTS))


def build_leave_request(fields: Payload) -> LeaveRequest:
    payload = validate_input(LeaveRequestCreate, fields)
    values = resolve_defaults(payload, LEAVE_REQUEST_DEFAULTS)
    values["start_date"], values["end_date"] = dates.normalize(payload.start_date, payload.end_date)
    return LeaveRequest(id=new_id(), **values)


def merge_leave_request(existing: LeaveRequest, patch: Payload) -> LeaveRequest:
    changes = validate_input(LeaveRequestUpdate, patch).changes()
    merged = existing.model_dump()
    merged.update(changes)
    merged["start_date"], merged["end_date"] = dates.normalize(merged["start_date"], merged["end_date"])
    return LeaveRequest.model_validate(merged)


def build_holiday(fields: Payload) -> Holiday:
    payload = validate_input(HolidayCreate, fields)
    return Holiday(id=new_id(), **resolve_defaults(payload, HOLIDAY_DEFAULTS))


def check_ticket(ticket: Optional[QueryTicket]) -> None:
    if ticket is not None and not ticket.is_current:
        raise StaleQueryError(f"Query #{ticket.number} was superseded")


class LedgerStore(ABC):
    """
    Persistence and retrieval for employees, leave requests and holidays.

    Reads always return independent copies. Update and delete report a missing
    id through a sentinel (None / False) rather than raising. List operations
    accept an optional QueryTicket and raise StaleQueryError when the ticket
    was superseded before the result was ready.
    """

    name: str = "ledger"

    # --- Employees ---

    @abstractmethod
    def list_employees(self, ticket: Optional[QueryTicket] = None) -> List[Employee]:
        ...

    @abstractmethod
    def get_employee(self, employee_id: str) -> Optional[Employee]:
        ...

    def require_employee(self, employee_id: str) -> Employee:
        employee = self.get_employee(employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee

    @abstractmethod
    def create_employee(self, fields: Payload) -> Employee:
        ...

    @abstractmethod
    def delete_employee(self, employee_id: str, cascade: bool = False) -> bool:
        """Delete an employee. Leave requests are kept unless ``cascade`` is set."""

    # --- Leave requests ---

    @abstractmethod
    def list_leave_requests(
        self,
        filters: Union[LeaveFilter, Dict[str, Any], None] = None,
        ticket: Optional[QueryTicket] = None,
    ) -> List[LeaveRequest]:
        ...

    @abstractmethod
    def get_leave_request(self, request_id: str) -> Optional[LeaveRequest]:
        ...

    @abstractmethod
    def create_leave_request(self, fields: Payload) -> LeaveRequest:
        ...

    @abstractmethod
    def update_leave_request(self, request_id: str, patch: Payload) -> Optional[LeaveRequest]:
        ...

    @abstractmethod
    def delete_leave_request(self, request_id: str) -> bool:
        ...

    # --- Holidays ---

    @abstractmethod
    def list_holidays(
        self,
        filters: Union[HolidayFilter, Dict[str, Any], None] = None,
        ticket: Optional[QueryTicket] = None,
    ) -> List[Holiday]:
        ...

    @abstractmethod
    def create_holiday(self, fields: Payload) -> Holiday:
        ...

    @abstractmethod
    def delete_holiday(self, holiday_id: str) -> bool:
        ...
