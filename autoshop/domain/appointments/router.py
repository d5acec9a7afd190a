"""Appointment router - FastAPI endpoints for booking and lifecycle"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ...auth import get_current_email
from ...database import get_db
from .schemas import (
    AppointmentCreate,
    AppointmentReschedule,
    AppointmentSummary,
    AppointmentUpdate,
    CompleteAppointmentRequest,
    ProgressUpdate,
)
from .service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])
employee_router = APIRouter(prefix="/employee/appointments", tags=["Employee Appointments"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


# ============================================================================
# CUSTOMER OPERATIONS
# ============================================================================


@router.post("", response_model=AppointmentSummary, status_code=201)
async def book_appointment(
    data: AppointmentCreate,
    email: str = Depends(get_current_email),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Book an appointment for one of the caller's vehicles"""
    return service.book(email, data)


@router.get("", response_model=list[AppointmentSummary])
async def get_my_appointments(
    email: str = Depends(get_current_email),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.get_my_appointments(email)


@router.get("/{appointment_id}", response_model=AppointmentSummary)
async def get_appointment(
    appointment_id: int,
    email: str = Depends(get_current_email),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Get an appointment; employees can view any appointment"""
    return service.get_appointment(email, appointment_id)


@router.patch("/{appointment_id}", response_model=AppointmentSummary)
async def update_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    email: str = Depends(get_current_email),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Update notes or schedule"""
    return service.update_appointment(email, appointment_id, data)


@router.post("/{appointment_id}/reschedule", response_model=AppointmentSummary)
async def reschedule_appointment(
    appointment_id: int,
    data: AppointmentReschedule,
    email: str = Depends(get_current_email),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.reschedule_appointment(email, appointment_id, data.scheduled_date_time)


@router.post("/{appointment_id}/cancel", response_model=AppointmentSummary)
async def cancel_appointment(
    appointment_id: int,
    email: str = Depends(get_current_email),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.cancel_appointment(email, appointment_id)


@router.delete("/{appointment_id}", status_code=204)
async def delete_appointment(
    appointment_id: int,
    email: str = Depends(get_current_email),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Delete an appointment that has not started yet"""
    service.delete_appointment(email, appointment_id)
    return Response(status_code=204)


# ============================================================================
# EMPLOYEE WORKFLOW
# ============================================================================


@employee_router.post("/{appointment_id}/confirm", response_model=AppointmentSummary)
async def confirm_appointment(
    appointment_id: int,
    email: str = Depends(get_current_email),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.confirm_appointment(email, appointment_id)


@employee_router.post("/{appointment_id}/start", response_model=AppointmentSummary)
async def start_appointment(
    appointment_id: int,
    email: str = Depends(get_current_email),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Start work (mark as in progress)"""
    return service.start_appointment(email, appointment_id)


@employee_router.patch("/{appointment_id}/progress", response_model=AppointmentSummary)
async def update_progress(
    appointment_id: int,
    data: ProgressUpdate,
    email: str = Depends(get_current_email),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.update_progress(
        email, appointment_id, data.progress_percentage, data.employee_notes
    )


@employee_router.post("/{appointment_id}/complete", response_model=AppointmentSummary)
async def complete_appointment(
    appointment_id: int,
    data: CompleteAppointmentRequest,
    email: str = Depends(get_current_email),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Complete an appointment and record its final cost"""
    return service.complete_appointment(
        email, appointment_id, data.final_cost, data.employee_notes
    )
