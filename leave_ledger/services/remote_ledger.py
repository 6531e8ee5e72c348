"""
Remote backend: a PostgREST-style REST API (e.g. Supabase) holding the
``employees``, ``vacations`` and ``holidays`` tables.

Every call can fail; failures surface as BackendError with the server's own
message when it sends one. Nothing is retried here.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type, TypeVar, Union

import requests
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from leave_ledger.core.config import settings
from leave_ledger.core.exceptions import BackendError
from leave_ledger.schemas.ledger import (
    Employee,
    Holiday,
    HolidayFilter,
    LeaveFilter,
    LeaveRequest,
)
from leave_ledger.services.ledger_store import (
    LedgerStore,
    Payload,
    build_employee,
    build_holiday,
    build_leave_request,
    check_ticket,
    merge_leave_request,
    sort_employees,
    sort_holidays,
    sort_leave_requests,
    validate_input,
)
from leave_ledger.services.query_guard import QueryTicket

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)
Params = List[Tuple[str, str]]

EMPLOYEES = "employees"
VACATIONS = "vacations"
HOLIDAYS = "holidays"


def _error_message(response: requests.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("message") or body.get("error_description") or body.get("error")
    return None


def _eq(value: Any) -> str:
    return f"eq.{value.value if hasattr(value, 'value') else value}"


class RemoteLedger(LedgerStore):
    name = "remote"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        if not base_url or not api_key:
            raise ValueError("Remote ledger needs both a base URL and an API key.")
        self.base_url = base_url.rstrip("/") + "/rest/v1"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    # --- Transport ---

    def _call(
        self,
        method: str,
        table: str,
        failure: str,
        params: Optional[Params] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Send one request and return the JSON rows.

        Args:
            failure: Message used when the server gives none.

        Raises:
            BackendError: On network failure or any non-2xx response.
        """
        headers = {"Prefer": "return=representation"} if method != "GET" else None
        try:
            response = self.session.request(
                method,
                f"{self.base_url}/{table}",
                params=params,
                json=body,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Remote ledger {method} {table} failed: {e}")
            raise BackendError(failure, details={"reason": str(e)}) from e

        if not response.ok:
            message = _error_message(response)
            logger.error(f"Remote ledger {method} {table} returned {response.status_code}: {message}")
            raise BackendError(message or failure, details={"status": response.status_code})

        if not response.content:
            return []
        try:
            rows = response.json()
        except ValueError as e:
            raise BackendError(failure, details={"reason": "response is not JSON"}) from e
        return rows if isinstance(rows, list) else [rows]

    def _parse(self, model: Type[M], rows: Sequence[Dict[str, Any]]) -> List[M]:
        try:
            return [model.model_validate(row) for row in rows]
        except PydanticValidationError as e:
            logger.error(f"Remote ledger returned malformed {model.__name__} rows: {e}")
            raise BackendError(f"The ledger backend returned malformed {model.__name__} data.") from e

    @staticmethod
    def _row(record: BaseModel) -> Dict[str, Any]:
        return record.model_dump(mode="json")

    # --- Employees ---

    def list_employees(self, ticket: Optional[QueryTicket] = None) -> List[Employee]:
        rows = self._call(
            "GET", EMPLOYEES, "Could not load employees",
            params=[("select", "*"), ("order", "first_name.asc,last_name.asc")],
        )
        result = sort_employees(self._parse(Employee, rows))
        check_ticket(ticket)
        return result

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        rows = self._call(
            "GET", EMPLOYEES, "Could not load employee",
            params=[("select", "*"), ("id", _eq(employee_id)), ("limit", "1")],
        )
        employees = self._parse(Employee, rows)
        return employees[0] if employees else None

    def create_employee(self, fields: Payload) -> Employee:
        employee = build_employee(fields)
        rows = self._call("POST", EMPLOYEES, "Could not add employee", body=self._row(employee))
        created = self._parse(Employee, rows)
        return created[0] if created else employee

    def delete_employee(self, employee_id: str, cascade: bool = False) -> bool:
        # Leave requests first; the employee row is always deleted last
        if cascade:
            self._call(
                "DELETE", VACATIONS, "Could not delete the employee's leave requests",
                params=[("employee_id", _eq(employee_id))],
            )
        rows = self._call(
            "DELETE", EMPLOYEES, "Could not delete employee", params=[("id", _eq(employee_id))]
        )
        if not rows:
            return False
        logger.info(f"Deleted employee {employee_id} (cascade={cascade})")
        return True

    # --- Leave requests ---

    def list_leave_requests(
        self,
        filters: Union[LeaveFilter, Dict[str, Any], None] = None,
        ticket: Optional[QueryTicket] = None,
    ) -> List[LeaveRequest]:
        criteria = validate_input(LeaveFilter, filters)
        params: Params = [("select", "*")]
        if criteria.employee_id:
            params.append(("employee_id", _eq(criteria.employee_id)))
        if criteria.type:
            params.append(("type", _eq(criteria.type)))
        if criteria.status:
            params.append(("status", _eq(criteria.status)))
        if criteria.from_date:
            params.append(("end_date", f"gte.{criteria.from_date.isoformat()}"))
        if criteria.to_date:
            params.append(("start_date", f"lte.{criteria.to_date.isoformat()}"))
        params.append(("order", "start_date.asc"))

        rows = self._call("GET", VACATIONS, "Could not load leave requests", params=params)
        result = sort_leave_requests(self._parse(LeaveRequest, rows))
        check_ticket(ticket)
        return result

    def get_leave_request(self, request_id: str) -> Optional[LeaveRequest]:
        rows = self._call(
            "GET", VACATIONS, "Could not load leave request",
            params=[("select", "*"), ("id", _eq(request_id)), ("limit", "1")],
        )
        found = self._parse(LeaveRequest, rows)
        return found[0] if found else None

    def create_leave_request(self, fields: Payload) -> LeaveRequest:
        request = build_leave_request(fields)
        rows = self._call("POST", VACATIONS, "Could not save leave request", body=self._row(request))
        created = self._parse(LeaveRequest, rows)
        return created[0] if created else request

    def update_leave_request(self, request_id: str, patch: Payload) -> Optional[LeaveRequest]:
        existing = self.get_leave_request(request_id)
        if existing is None:
            return None
        updated = merge_leave_request(existing, patch)
        body = self._row(updated)
        body.pop("id")
        rows = self._call(
            "PATCH", VACATIONS, "Could not update leave request",
            params=[("id", _eq(request_id))], body=body,
        )
        saved = self._parse(LeaveRequest, rows)
        # Deleted by someone else between the read and the write
        return saved[0] if saved else None

    def delete_leave_request(self, request_id: str) -> bool:
        rows = self._call(
            "DELETE", VACATIONS, "Could not delete leave request", params=[("id", _eq(request_id))]
        )
        return bool(rows)

    # --- Holidays ---

    def list_holidays(
        self,
        filters: Union[HolidayFilter, Dict[str, Any], None] = None,
        ticket: Optional[QueryTicket] = None,
    ) -> List[Holiday]:
        criteria = validate_input(HolidayFilter, filters)
        region = settings.holiday_region if criteria.region is None else criteria.region
        params: Params = [("select", "*")]
        if region:
            params.append(("region", _eq(region)))
        if criteria.year:
            params.append(("date", f"gte.{date(criteria.year, 1, 1).isoformat()}"))
            params.append(("date", f"lte.{date(criteria.year, 12, 31).isoformat()}"))
        params.append(("order", "date.asc"))

        rows = self._call("GET", HOLIDAYS, "Could not load holidays", params=params)
        result = sort_holidays(self._parse(Holiday, rows))
        check_ticket(ticket)
        return result

    def create_holiday(self, fields: Payload) -> Holiday:
        holiday = build_holiday(fields)
        rows = self._call("POST", HOLIDAYS, "Could not add holiday", body=self._row(holiday))
        created = self._parse(Holiday, rows)
        return created[0] if created else holiday

    def delete_holiday(self, holiday_id: str) -> bool:
        rows = self._call(
            "DELETE", HOLIDAYS, "Could not delete holiday", params=[("id", _eq(holiday_id))]
        )
        return bool(rows)
