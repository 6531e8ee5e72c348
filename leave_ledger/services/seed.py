from datetime import date
from typing import Any, Dict, Optional


def default_dataset(year: Optional[int] = None) -> Dict[str, Any]:
    """
    Seed data for a fresh snapshot ledger.
    Holiday and leave dates are placed in ``year`` (the current year by default).
    """
    year = year or date.today().year
    return {
        "employees": [
            {
                "id": "emp-ava",
                "first_name": "Ava",
                "last_name": "Lopez",
                "email": "ava@company.com",
                "team": "Ingenierie",
                "role": "employee",
                "allowance_days": 22,
                "carryover_days": 2,
                "timezone": "America/Los_Angeles",
                "active": True,
                "start_date": "2022-03-14",
            },
            {
                "id": "emp-noah",
                "first_name": "Noah",
                "last_name": "Patel",
                "email": "noah@company.com",
                "team": "Design",
                "role": "employee",
                "allowance_days": 20,
                "carryover_days": 0,
                "timezone": "America/New_York",
                "active": True,
                "start_date": "2021-08-01",
            },
            {
                "id": "emp-mia",
                "first_name": "Mia",
                "last_name": "Chen",
                "email": "mia@company.com",
                "team": "Ressources humaines",
                "role": "admin",
                "allowance_days": 25,
                "carryover_days": 3,
                "timezone": "Europe/London",
                "active": True,
                "start_date": "2020-01-10",
            },
        ],
        "holidays": [
            {"id": "hol-new-year", "region": "US", "date": f"{year}-01-01", "name": "Jour de l'An"},
            {"id": "hol-independence", "region": "US", "date": f"{year}-07-04", "name": "Fete de l'Independance"},
            {"id": "hol-thanksgiving", "region": "US", "date": f"{year}-11-27", "name": "Thanksgiving"},
            {"id": "hol-christmas", "region": "US", "date": f"{year}-12-25", "name": "Noel"},
        ],
        "vacations": [
            {
                "id": "vac-ava-summer",
                "employee_id": "emp-ava",
                "start_date": f"{year}-06-10",
                "end_date": f"{year}-06-14",
                "type": "ANNUAL",
                "status": "APPROVED",
                "notes": "Vacances d'ete",
            },
            {
                "id": "vac-noah-sick",
                "employee_id": "emp-noah",
                "start_date": f"{year}-07-02",
                "end_date": f"{year}-07-03",
                "type": "SICK",
                "status": "APPROVED",
                "notes": "Grippe",
            },
            {
                "id": "vac-mia-winter",
                "employee_id": "emp-mia",
                "start_date": f"{year}-12-22",
                "end_date": f"{year}-12-31",
                "type": "ANNUAL",
                "status": "APPROVED",
                "notes": "Vacances d'hiver",
            },
        ],
    }
