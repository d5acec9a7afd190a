"""Dashboard router - read-only endpoints for customer and employee dashboards"""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_email
from ...database import get_db
from ..appointments.schemas import AppointmentSummary
from .schemas import CustomerDashboardCounts, EmployeeDashboardCounts
from .service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    """Dependency injection for DashboardService"""
    return DashboardService(db)


@router.get("/customer", response_model=CustomerDashboardCounts)
async def customer_counts(
    email: str = Depends(get_current_email),
    service: DashboardService = Depends(get_dashboard_service),
):
    """All customer dashboard counters"""
    return service.counts(email)


@router.get("/customer/appointments/count", response_model=int)
async def appointment_count(
    email: str = Depends(get_current_email),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.appointment_count(email)


@router.get("/customer/appointments/active/count", response_model=int)
async def active_appointment_count(
    email: str = Depends(get_current_email),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.active_appointment_count(email)


@router.get("/customer/services/completed/count", response_model=int)
async def completed_services_count(
    email: str = Depends(get_current_email),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.completed_services_count(email)


@router.get("/customer/vehicles/count", response_model=int)
async def vehicle_count(
    email: str = Depends(get_current_email),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.vehicle_count(email)


@router.get("/customer/spent/total", response_model=Optional[Decimal])
async def total_spent(
    email: str = Depends(get_current_email),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.total_spent(email)


@router.get("/customer/appointments/upcoming", response_model=list[AppointmentSummary])
async def upcoming_appointments(
    email: str = Depends(get_current_email),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Appointments scheduled from tomorrow onwards, earliest first"""
    return service.upcoming_appointments(email)


@router.get("/employee", response_model=EmployeeDashboardCounts)
async def employee_counts(
    email: str = Depends(get_current_email),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.employee_counts(email)
