import pytest
from datetime import date
from leave_ledger.core.exceptions import BackendError, NotFoundError, ValidationError
from leave_ledger.models.enums import LeaveStatus, LeaveType, Role
from leave_ledger.services.local_ledger import LocalSnapshotLedger


def _add_leave(ledger, employee_id, start, end, **extra):
    return ledger.create_leave_request({
        "employee_id": employee_id, "start_date": start, "end_date": end, **extra
    })


# --- Employees ---

def test_list_employees_sorted_by_first_then_last_name(ledger):
    ledger.create_employee({"first_name": "Ava", "last_name": "Adams"})
    names = [(e.first_name, e.last_name) for e in ledger.list_employees()]
    assert names == [("Ava", "Adams"), ("Ava", "Lopez"), ("Mia", "Chen"), ("Noah", "Patel")]


def test_list_employees_ignores_accents_and_case(ledger):
    ledger.create_employee({"first_name": "Élodie", "last_name": "Roux"})
    ledger.create_employee({"first_name": "bruno", "last_name": "Sousa"})
    names = [e.first_name for e in ledger.list_employees()]
    assert names == ["Ava", "bruno", "Élodie", "Mia", "Noah"]


def test_get_employee(ledger):
    assert ledger.get_employee("emp-ava").email == "ava@company.com"
    assert ledger.get_employee("missing") is None
    with pytest.raises(NotFoundError):
        ledger.require_employee("missing")


def test_create_employee_fills_every_default(ledger):
    employee = ledger.create_employee({})
    assert employee.id
    assert employee.first_name == "Nouveau"
    assert employee.last_name == "Collaborateur"
    assert employee.email.startswith("collaborateur-")
    assert employee.team == "General"
    assert employee.role == Role.EMPLOYEE
    assert employee.allowance_days == 20
    assert employee.carryover_days == 0
    assert employee.timezone == "Europe/Paris"
    assert employee.active is True
    assert employee.start_date == date.today()
    assert ledger.get_employee(employee.id) == employee


def test_create_employee_coerces_day_counts(ledger):
    employee = ledger.create_employee({"first_name": "  ", "allowance_days": "18.5", "carryover_days": "3"})
    assert employee.first_name == "Nouveau"
    assert employee.allowance_days == 18.5
    assert employee.carryover_days == 3

    fallback = ledger.create_employee({"allowance_days": "lots", "carryover_days": -4})
    assert fallback.allowance_days == 20
    assert fallback.carryover_days == 0


def test_create_employee_rejects_unknown_role(ledger):
    before = len(ledger.list_employees())
    with pytest.raises(ValidationError):
        ledger.create_employee({"first_name": "Max", "role": "boss"})
    assert len(ledger.list_employees()) == before


def test_reads_return_copies(ledger):
    employee = ledger.get_employee("emp-ava")
    employee.first_name = "Changed"
    ledger.list_employees()[0].last_name = "Changed"
    ledger.list_leave_requests()[0].notes = "Changed"

    assert ledger.get_employee("emp-ava").first_name == "Ava"
    assert ledger.list_employees()[0].last_name == "Lopez"
    assert ledger.list_leave_requests()[0].notes != "Changed"


def test_delete_employee_keeps_leave_requests_by_default(ledger):
    assert ledger.delete_employee("emp-noah") is True
    assert ledger.get_employee("emp-noah") is None
    assert len(ledger.list_leave_requests({"employee_id": "emp-noah"})) == 1


def test_delete_employee_cascade(ledger):
    assert ledger.delete_employee("emp-noah", cascade=True) is True
    assert ledger.list_leave_requests({"employee_id": "emp-noah"}) == []
    assert len(ledger.list_leave_requests()) == 2


def test_delete_missing_employee(ledger):
    assert ledger.delete_employee("missing") is False


# --- Leave requests ---

def test_create_leave_request_normalizes_and_defaults(ledger, employee):
    created = _add_leave(ledger, employee.id, "2024-06-14", "2024-06-10")
    assert created.start_date == date(2024, 6, 10)
    assert created.end_date == date(2024, 6, 14)
    assert created.type == LeaveType.ANNUAL
    assert created.status == LeaveStatus.APPROVED
    assert created.notes == ""

    stored = ledger.get_leave_request(created.id)
    assert stored == created


def test_create_leave_request_single_day(ledger, employee):
    created = ledger.create_leave_request({"employee_id": employee.id, "start_date": "2024-03-01"})
    assert created.start_date == created.end_date == date(2024, 3, 1)
    assert created.days == 1


@pytest.mark.parametrize("payload", [
    {"start_date": "2024-06-10"},
    {"employee_id": "  ", "start_date": "2024-06-10"},
    {"employee_id": "emp-ava"},
    {"employee_id": "emp-ava", "start_date": "not-a-date"},
    {"employee_id": "emp-ava", "start_date": "2024-06-10", "type": "HOLIDAY"},
])
def test_create_leave_request_validation(ledger, payload):
    before = len(ledger.list_leave_requests())
    with pytest.raises(ValidationError):
        ledger.create_leave_request(payload)
    assert len(ledger.list_leave_requests()) == before


def test_update_leave_request_merges_and_renormalizes(ledger, employee):
    created = _add_leave(ledger, employee.id, "2024-06-10", "2024-06-14", notes="Beach")
    updated = ledger.update_leave_request(created.id, {"start_date": "2024-06-20", "type": "COMP_TIME"})

    assert updated.start_date == date(2024, 6, 14)
    assert updated.end_date == date(2024, 6, 20)
    assert updated.type == LeaveType.COMP_TIME
    assert updated.notes == "Beach"
    assert ledger.get_leave_request(created.id) == updated


def test_update_leave_request_status_and_notes(ledger, employee):
    created = _add_leave(ledger, employee.id, "2024-06-10", "2024-06-14", notes="Beach")
    updated = ledger.update_leave_request(created.id, {"status": "CANCELLED", "notes": None})
    assert updated.status == LeaveStatus.CANCELLED
    assert updated.notes == ""


def test_update_missing_leave_request_returns_none(ledger):
    assert ledger.update_leave_request("missing", {"notes": "x"}) is None


def test_update_leave_request_invalid_patch(ledger):
    with pytest.raises(ValidationError):
        ledger.update_leave_request("vac-ava-summer", {"status": "MAYBE"})
    assert ledger.get_leave_request("vac-ava-summer").status == LeaveStatus.APPROVED


def test_delete_leave_request(ledger):
    assert ledger.delete_leave_request("vac-ava-summer") is True
    assert ledger.get_leave_request("vac-ava-summer") is None
    assert ledger.delete_leave_request("vac-ava-summer") is False


def test_delete_missing_leave_request_does_not_raise(ledger):
    assert ledger.delete_leave_request("does-not-exist") is False


def test_list_leave_requests_ordered_by_start_date(ledger, employee):
    _add_leave(ledger, employee.id, "2024-09-01", "2024-09-02")
    _add_leave(ledger, employee.id, "2024-02-01", "2024-02-02")
    _add_leave(ledger, employee.id, "2024-05-01", "2024-05-02")
    starts = [r.start_date.month for r in ledger.list_leave_requests({"employee_id": employee.id})]
    assert starts == [2, 5, 9]


def test_list_leave_requests_overlap_filter(ledger, employee):
    early = _add_leave(ledger, employee.id, "2024-06-01", "2024-06-05")
    middle = _add_leave(ledger, employee.id, "2024-06-10", "2024-06-14")
    late = _add_leave(ledger, employee.id, "2024-06-20", "2024-06-25")

    def ids(**filters):
        return [r.id for r in ledger.list_leave_requests({"employee_id": employee.id, **filters})]

    assert ids(**{"from": "2024-06-05", "to": "2024-06-10"}) == [early.id, middle.id]
    assert ids(**{"from": "2024-06-15"}) == [late.id]
    assert ids(**{"to": "2024-06-09"}) == [early.id]
    assert ids(**{"from": "2024-06-06", "to": "2024-06-09"}) == []
    assert ids(**{"from": "2024-06-12", "to": "2024-06-12"}) == [middle.id]


def test_list_leave_requests_exact_match_filters(ledger, employee):
    sick = _add_leave(ledger, employee.id, "2024-03-01", "2024-03-02", type="SICK")
    pending = _add_leave(ledger, employee.id, "2024-04-01", "2024-04-02", status="PENDING")

    assert [r.id for r in ledger.list_leave_requests({"employee_id": employee.id, "type": "SICK"})] == [sick.id]
    assert [r.id for r in ledger.list_leave_requests({"employee_id": employee.id, "status": "PENDING"})] == [pending.id]
    assert len(ledger.list_leave_requests({"type": "SICK"})) == 2


def test_employee_filter_accepts_camel_case_key(ledger):
    found = ledger.list_leave_requests({"employeeId": "emp-ava"})
    assert [r.employee_id for r in found] == ["emp-ava"]


def test_unknown_filter_key_is_rejected(ledger):
    with pytest.raises(ValidationError) as exc:
        ledger.list_leave_requests({"employe_id": "emp-ava"})
    assert exc.value.details["errors"][0]["field"] == "employe_id"
    with pytest.raises(ValidationError):
        ledger.list_holidays({"country": "US"})


# --- Holidays ---

def test_list_holidays_defaults_to_configured_region(ledger):
    holidays = ledger.list_holidays({"year": 2024})
    assert [h.id for h in holidays] == ["hol-new-year", "hol-independence", "hol-thanksgiving", "hol-christmas"]
    assert ledger.list_holidays({"year": 2023}) == []
    assert ledger.list_holidays({"region": "FR"}) == []


def test_create_and_delete_holiday(ledger):
    holiday = ledger.create_holiday({"region": "FR", "date": "2024-07-14", "name": "Fete nationale"})
    assert [h.id for h in ledger.list_holidays({"region": "FR", "year": 2024})] == [holiday.id]
    assert ledger.delete_holiday(holiday.id) is True
    assert ledger.delete_holiday(holiday.id) is False
    assert ledger.list_holidays({"region": "FR"}) == []


def test_create_holiday_requires_name(ledger):
    with pytest.raises(ValidationError):
        ledger.create_holiday({"date": "2024-07-14", "name": " "})


# --- Persistence ---

def test_mutations_are_persisted(ledger, storage, employee):
    created = _add_leave(ledger, employee.id, "2024-06-10", "2024-06-14")
    reopened = LocalSnapshotLedger(storage)
    assert reopened.get_employee(employee.id) == employee
    assert reopened.get_leave_request(created.id) == created


def test_failed_write_leaves_state_unchanged(ledger, storage, monkeypatch):
    before = ledger.list_leave_requests()

    def broken_write(payload):
        raise BackendError("Could not save the ledger snapshot.")

    monkeypatch.setattr(storage, "write", broken_write)
    with pytest.raises(BackendError):
        ledger.create_leave_request({"employee_id": "emp-ava", "start_date": "2024-08-01"})
    assert ledger.list_leave_requests() == before
