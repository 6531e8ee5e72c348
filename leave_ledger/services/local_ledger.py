"""
Snapshot backend: the whole ledger lives in memory and is written back to
durable storage as one JSON blob after every mutation.
"""
import json
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError

from leave_ledger.core.config import settings
from leave_ledger.core.exceptions import BackendError, CorruptStateError
from leave_ledger.schemas.ledger import (
    Employee,
    Holiday,
    HolidayFilter,
    LeaveFilter,
    LeaveRequest,
    LedgerState,
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
from leave_ledger.services.seed import default_dataset
from leave_ledger.services.snapshot_storage import SnapshotStorage

logger = logging.getLogger(__name__)

# Collections that are reseeded when missing or empty. An empty vacations
# list is a legitimate state (every request deleted); a missing one is not.
REQUIRED_COLLECTIONS = ("employees", "holidays")
COLLECTIONS = ("employees", "holidays", "vacations")


def heal_snapshot(data: Any, seed: Dict[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
    """
    Replace missing or invalid collections in a decoded snapshot with the seed ones.
    Returns the healed data and the names of the collections that were restored.

    Raises:
        CorruptStateError: If ``data`` is not an object at all.
    """
    if not isinstance(data, dict):
        raise CorruptStateError(f"snapshot root is {type(data).__name__}, expected an object")
    healed = dict(data)
    restored = []
    for name in COLLECTIONS:
        value = data.get(name)
        if not isinstance(value, list):
            logger.warning(f"Snapshot collection '{name}' is missing or not a list; restoring defaults")
        elif not value and name in REQUIRED_COLLECTIONS:
            logger.warning(f"Snapshot collection '{name}' is empty; restoring defaults")
        else:
            continue
        healed[name] = seed[name]
        restored.append(name)
    return healed, restored


def parse_snapshot(raw: str, seed: Dict[str, Any]) -> Tuple[LedgerState, List[str]]:
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise CorruptStateError(f"snapshot is not valid JSON: {e}") from e
    healed, restored = heal_snapshot(data, seed)
    try:
        return LedgerState.model_validate(healed), restored
    except PydanticValidationError as e:
        raise CorruptStateError(f"snapshot records are invalid: {e.error_count()} error(s)") from e


class LocalSnapshotLedger(LedgerStore):
    name = "local"

    def __init__(
        self,
        storage: SnapshotStorage,
        seed_factory: Callable[[], Dict[str, Any]] = default_dataset,
    ):
        self.storage = storage
        self.seed_factory = seed_factory
        self._state: Optional[LedgerState] = None
        self._lock = threading.RLock()

    # --- State management ---

    @property
    def state(self) -> LedgerState:
        with self._lock:
            if self._state is None:
                self._state = self._load()
            return self._state

    def _seed_state(self) -> LedgerState:
        return LedgerState.model_validate(self.seed_factory())

    def _load(self) -> LedgerState:
        """Read the stored snapshot, reseeding (and logging why) when it is empty or unusable."""
        try:
            raw = self.storage.read()
        except SQLAlchemyError as e:
            logger.warning(f"Snapshot storage unreadable, starting from defaults: {e}")
            return self._reseed()

        if not raw:
            logger.info(f"No snapshot stored under '{self.storage.key}', seeding default dataset")
            return self._reseed()

        try:
            state, restored = parse_snapshot(raw, self.seed_factory())
        except CorruptStateError as e:
            logger.warning(f"Recovered from corrupt snapshot '{self.storage.key}': {e}")
            return self._reseed()

        if restored:
            logger.warning(f"Snapshot '{self.storage.key}' healed, restored defaults for: {', '.join(restored)}")
            self._persist_quietly(state.model_dump_json())
        return state

    def _reseed(self) -> LedgerState:
        state = self._seed_state()
        self._persist_quietly(state.model_dump_json())
        return state

    def _persist_quietly(self, payload: str) -> None:
        # Recovery must not fail the read that triggered it
        try:
            self.storage.write(payload)
        except BackendError as e:
            logger.warning(f"Snapshot recovery kept in memory only: {e.message}")

    def _commit(self, mutate: Callable[[LedgerState], Any]) -> Any:
        """Apply ``mutate`` to a copy, persist it, then swap it in. Nothing changes if the write fails."""
        with self._lock:
            draft = self.state.model_copy(deep=True)
            result = mutate(draft)
            self.storage.write(draft.model_dump_json())
            self._state = draft
            return result

    def reset(self) -> None:
        """Discard the current dataset and persist a fresh default one."""
        with self._lock:
            state = self._seed_state()
            self.storage.write(state.model_dump_json())
            self._state = state
        logger.info(f"Snapshot ledger '{self.storage.key}' reset to default dataset")

    # --- Employees ---

    def list_employees(self, ticket: Optional[QueryTicket] = None) -> List[Employee]:
        result = [e.model_copy(deep=True) for e in sort_employees(self.state.employees)]
        check_ticket(ticket)
        return result

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        for employee in self.state.employees:
            if employee.id == employee_id:
                return employee.model_copy(deep=True)
        return None

    def create_employee(self, fields: Payload) -> Employee:
        employee = build_employee(fields)
        self._commit(lambda s: s.employees.append(employee))
        logger.info(f"Created employee {employee.id} ({employee.email})")
        return employee.model_copy(deep=True)

    def delete_employee(self, employee_id: str, cascade: bool = False) -> bool:
        if self.get_employee(employee_id) is None:
            return False

        def _delete(s: LedgerState):
            s.employees = [e for e in s.employees if e.id != employee_id]
            if cascade:
                s.vacations = [v for v in s.vacations if v.employee_id != employee_id]

        self._commit(_delete)
        logger.info(f"Deleted employee {employee_id} (cascade={cascade})")
        return True

    # --- Leave requests ---

    def list_leave_requests(
        self,
        filters: Union[LeaveFilter, Dict[str, Any], None] = None,
        ticket: Optional[QueryTicket] = None,
    ) -> List[LeaveRequest]:
        criteria = validate_input(LeaveFilter, filters)
        matched = [v for v in self.state.vacations if criteria.matches(v)]
        result = [v.model_copy(deep=True) for v in sort_leave_requests(matched)]
        check_ticket(ticket)
        return result

    def get_leave_request(self, request_id: str) -> Optional[LeaveRequest]:
        for vacation in self.state.vacations:
            if vacation.id == request_id:
                return vacation.model_copy(deep=True)
        return None

    def create_leave_request(self, fields: Payload) -> LeaveRequest:
        request = build_leave_request(fields)
        self._commit(lambda s: s.vacations.append(request))
        return request.model_copy(deep=True)

    def update_leave_request(self, request_id: str, patch: Payload) -> Optional[LeaveRequest]:
        existing = self.get_leave_request(request_id)
        if existing is None:
            return None
        updated = merge_leave_request(existing, patch)

        def _replace(s: LedgerState):
            s.vacations = [updated if v.id == request_id else v for v in s.vacations]

        self._commit(_replace)
        return updated.model_copy(deep=True)

    def delete_leave_request(self, request_id: str) -> bool:
        if self.get_leave_request(request_id) is None:
            return False

        def _delete(s: LedgerState):
            s.vacations = [v for v in s.vacations if v.id != request_id]

        self._commit(_delete)
        return True

    # --- Holidays ---

    def list_holidays(
        self,
        filters: Union[HolidayFilter, Dict[str, Any], None] = None,
        ticket: Optional[QueryTicket] = None,
    ) -> List[Holiday]:
        criteria = validate_input(HolidayFilter, filters)
        if criteria.region is None:
            criteria = criteria.model_copy(update={"region": settings.holiday_region})
        matched = [h for h in self.state.holidays if criteria.matches(h)]
        result = [h.model_copy(deep=True) for h in sort_holidays(matched)]
        check_ticket(ticket)
        return result

    def create_holiday(self, fields: Payload) -> Holiday:
        holiday = build_holiday(fields)
        self._commit(lambda s: s.holidays.append(holiday))
        return holiday.model_copy(deep=True)

    def delete_holiday(self, holiday_id: str) -> bool:
        if not any(h.id == holiday_id for h in self.state.holidays):
            return False

        def _delete(s: LedgerState):
            s.holidays = [h for h in s.holidays if h.id != holiday_id]

        self._commit(_delete)
        return True
