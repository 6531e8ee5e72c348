from fastapi import APIRouter
from leave_ledger.routers import dashboard, employees, holidays, leave_requests

# Centralized API router hub; main.py only imports this one.
api_router = APIRouter()

api_router.include_router(employees.router, tags=["Employees"])
api_router.include_router(leave_requests.router, tags=["Leave"])
api_router.include_router(holidays.router, tags=["Holidays"])
api_router.include_router(dashboard.router, tags=["Dashboard"])
