"""Appointment service - Booking validation and lifecycle operations"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...config import REQUIRE_FINAL_COST_ON_COMPLETE
from ...errors import (
    DuplicateResource,
    InvalidArgument,
    ResourceNotFound,
    Unauthorized,
    UserNotFound,
    VehicleNotFound,
)
from ...models import Appointment, User
from ..identity import IdentityRepository
from .lifecycle import INITIAL_STATUS, AppointmentStatus, LifecyclePolicy
from .policies import can_mutate, can_view, can_work
from .pricing import to_summary
from .repository import AppointmentRepository
from .schemas import AppointmentCreate, AppointmentSummary, AppointmentUpdate

logger = logging.getLogger(__name__)

DUPLICATE_TIME_MESSAGE = "You already have an appointment scheduled at that time"


def is_schedule_conflict(error: IntegrityError) -> bool:
    """True when the violation is the (customer, scheduled time) uniqueness rule"""
    # PostgreSQL names the constraint, SQLite lists the columns
    message = str(error.orig)
    return "uq_appointment_customer_time" in message or (
        "UNIQUE" in message.upper() and "scheduled_date_time" in message
    )


class AppointmentService:
    """Service layer for appointment booking and lifecycle"""

    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] = datetime.now,
        policy: Optional[LifecyclePolicy] = None,
        require_final_cost: bool = REQUIRE_FINAL_COST_ON_COMPLETE,
    ):
        self.db = db
        self.clock = clock
        self.policy = policy or LifecyclePolicy()
        self.require_final_cost = require_final_cost
        self.repo = AppointmentRepository()
        self.identity = IdentityRepository()

    # ------------------------------------------------------------------
    # Lookups shared by every guarded operation
    # ------------------------------------------------------------------

    def _get_principal(self, email: str) -> User:
        user = self.identity.get_user_by_email(self.db, email)
        if not user:
            logger.warning(f"⚠️ No user for email {email}")
            raise UserNotFound("Customer not found")
        return user

    def _get_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.repo.get_by_id(self.db, appointment_id)
        if not appointment:
            raise ResourceNotFound("Appointment not found")
        return appointment

    def _load_owned(self, email: str, appointment_id: int) -> Appointment:
        """Resolve principal and appointment, then require ownership"""
        user = self._get_principal(email)
        appointment = self._get_appointment(appointment_id)
        if not can_mutate(user, appointment):
            logger.warning(f"⚠️ User {user.id} tried to modify appointment {appointment_id}")
            raise Unauthorized("You can only modify your own appointments")
        return appointment

    def _load_for_work(self, email: str, appointment_id: int) -> tuple[User, Appointment]:
        """Resolve employee and appointment, then require the work capability"""
        user = self._get_principal(email)
        appointment = self._get_appointment(appointment_id)
        if not can_work(user, appointment):
            logger.warning(f"⚠️ User {user.id} may not work on appointment {appointment_id}")
            raise Unauthorized("Only the assigned employee can work on this appointment")
        return user, appointment

    def _commit(self, appointment: Appointment) -> Appointment:
        """Save, turning a (customer, time) uniqueness violation into DuplicateResource"""
        appointment_id = appointment.id
        try:
            return self.repo.save(self.db, appointment)
        except IntegrityError as e:
            self.db.rollback()
            if not is_schedule_conflict(e):
                logger.error(f"❌ Failed to save appointment {appointment_id}: {e.orig}")
                raise
            raise DuplicateResource(DUPLICATE_TIME_MESSAGE) from e

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------

    def book(self, customer_email: str, data: AppointmentCreate) -> AppointmentSummary:
        """Validate a booking request and persist a SCHEDULED appointment.

        Checks run in a fixed order and the first failing one decides the error;
        nothing is written unless every check passes.
        """
        customer = self._get_principal(customer_email)

        vehicle = self.identity.get_vehicle_by_id(self.db, data.vehicle_id)
        if not vehicle:
            raise VehicleNotFound("Vehicle not found")

        if vehicle.owner_id != customer.id:
            logger.warning(
                f"⚠️ User {customer.id} tried to book vehicle {vehicle.id} owned by {vehicle.owner_id}"
            )
            raise Unauthorized("You can only book appointments for your own vehicles")

        if data.scheduled_date_time <= self.clock():
            raise InvalidArgument("Cannot schedule appointment in the past")

        if not data.service_ids:
            raise InvalidArgument("At least one service must be selected")

        services = self.identity.get_services_by_ids(self.db, data.service_ids)
        found_ids = {s.id for s in services}
        missing = [sid for sid in data.service_ids if sid not in found_ids]
        inactive = [s.name for s in services if not s.is_active]
        if missing or inactive:
            unavailable = [str(sid) for sid in missing] + inactive
            raise InvalidArgument(f"Service not available: {', '.join(unavailable)}")

        if self.repo.exists_for_customer_at(self.db, customer.id, data.scheduled_date_time):
            raise DuplicateResource(DUPLICATE_TIME_MESSAGE)

        try:
            appointment = self.repo.create(
                self.db,
                customer_id=customer.id,
                vehicle_id=vehicle.id,
                scheduled_date_time=data.scheduled_date_time,
                status=INITIAL_STATUS.value,
                progress_percentage=0,
                customer_notes=data.customer_notes,
                services=services,
            )
        except IntegrityError as e:
            self.db.rollback()
            if not is_schedule_conflict(e):
                raise
            # Concurrent booking won the race for the same slot
            raise DuplicateResource(DUPLICATE_TIME_MESSAGE) from e

        logger.info(
            f"✅ Appointment {appointment.id} booked by user {customer.id} "
            f"for {appointment.scheduled_date_time.isoformat()}"
        )
        return to_summary(appointment)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_my_appointments(self, customer_email: str) -> list[AppointmentSummary]:
        """Get all appointments for the customer"""
        customer = self._get_principal(customer_email)
        return [to_summary(a) for a in self.repo.list_by_customer_id(self.db, customer.id)]

    def get_appointment(self, caller_email: str, appointment_id: int) -> AppointmentSummary:
        """Get a specific appointment; employees may view any appointment"""
        user = self._get_principal(caller_email)
        appointment = self._get_appointment(appointment_id)
        if not can_view(user, appointment):
            raise Unauthorized("You can only view your own appointments")
        return to_summary(appointment)

    # ------------------------------------------------------------------
    # Customer lifecycle operations
    # ------------------------------------------------------------------

    def update_appointment(
        self, customer_email: str, appointment_id: int, data: AppointmentUpdate
    ) -> AppointmentSummary:
        """Edit notes and/or schedule. Status is left untouched."""
        appointment = self._load_owned(customer_email, appointment_id)
        self.policy.ensure_editable(appointment.status)

        if data.customer_notes is not None:
            appointment.customer_notes = data.customer_notes

        if (
            data.scheduled_date_time is not None
            and data.scheduled_date_time != appointment.scheduled_date_time
        ):
            if self.repo.exists_for_customer_at(
                self.db, appointment.customer_id, data.scheduled_date_time, exclude_id=appointment.id
            ):
                self.db.rollback()
                raise DuplicateResource(DUPLICATE_TIME_MESSAGE)
            appointment.scheduled_date_time = data.scheduled_date_time

        appointment = self._commit(appointment)
        logger.info(f"✅ Appointment {appointment.id} updated")
        return to_summary(appointment)

    def reschedule_appointment(
        self, customer_email: str, appointment_id: int, new_date_time: datetime
    ) -> AppointmentSummary:
        """Move a SCHEDULED appointment to a new future time (→ RESCHEDULED)"""
        appointment = self._load_owned(customer_email, appointment_id)
        target = self.policy.ensure_transition(appointment.status, AppointmentStatus.RESCHEDULED)

        if new_date_time <= self.clock():
            raise InvalidArgument("Cannot schedule appointment in the past")

        if self.repo.exists_for_customer_at(
            self.db, appointment.customer_id, new_date_time, exclude_id=appointment.id
        ):
            raise DuplicateResource(DUPLICATE_TIME_MESSAGE)

        appointment.scheduled_date_time = new_date_time
        appointment.status = target.value
        appointment = self._commit(appointment)
        logger.info(f"✅ Appointment {appointment.id} rescheduled to {new_date_time.isoformat()}")
        return to_summary(appointment)

    def cancel_appointment(self, customer_email: str, appointment_id: int) -> AppointmentSummary:
        appointment = self._load_owned(customer_email, appointment_id)
        target = self.policy.ensure_cancellable(appointment.status)

        previous = appointment.status
        appointment.status = target.value
        appointment.cancelled_at = self.clock()
        appointment = self._commit(appointment)
        logger.info(f"✅ Appointment {appointment.id} transitioned: {previous} → {target.value}")
        return to_summary(appointment)

    def delete_appointment(self, customer_email: str, appointment_id: int) -> None:
        appointment = self._load_owned(customer_email, appointment_id)
        self.policy.ensure_deletable(appointment.status)

        self.repo.delete_by_id(self.db, appointment.id)
        logger.info(f"🗑️ Appointment {appointment_id} deleted")

    # ------------------------------------------------------------------
    # Employee workflow
    # ------------------------------------------------------------------

    def confirm_appointment(self, employee_email: str, appointment_id: int) -> AppointmentSummary:
        _, appointment = self._load_for_work(employee_email, appointment_id)
        target = self.policy.ensure_transition(appointment.status, AppointmentStatus.CONFIRMED)

        appointment.status = target.value
        appointment = self._commit(appointment)
        logger.info(f"✅ Appointment {appointment.id} confirmed")
        return to_summary(appointment)

    def start_appointment(self, employee_email: str, appointment_id: int) -> AppointmentSummary:
        employee, appointment = self._load_for_work(employee_email, appointment_id)
        target = self.policy.ensure_transition(appointment.status, AppointmentStatus.IN_PROGRESS)

        appointment.status = target.value
        appointment.started_at = self.clock()
        if appointment.assigned_employee_id is None:
            appointment.assigned_employee_id = employee.id
        appointment = self._commit(appointment)
        logger.info(f"✅ Appointment {appointment.id} started by employee {employee.id}")
        return to_summary(appointment)

    def update_progress(
        self,
        employee_email: str,
        appointment_id: int,
        progress_percentage: int,
        employee_notes: Optional[str] = None,
    ) -> AppointmentSummary:
        _, appointment = self._load_for_work(employee_email, appointment_id)
        self.policy.ensure_in_progress(appointment.status)

        if not 0 <= progress_percentage <= 100:
            raise InvalidArgument("Progress percentage must be between 0 and 100")

        appointment.progress_percentage = progress_percentage
        if employee_notes is not None:
            appointment.employee_notes = employee_notes
        appointment = self._commit(appointment)
        logger.info(f"📊 Appointment {appointment.id} progress: {progress_percentage}%")
        return to_summary(appointment)

    def complete_appointment(
        self,
        employee_email: str,
        appointment_id: int,
        final_cost: Optional[Decimal] = None,
        employee_notes: Optional[str] = None,
    ) -> AppointmentSummary:
        _, appointment = self._load_for_work(employee_email, appointment_id)
        target = self.policy.ensure_transition(appointment.status, AppointmentStatus.COMPLETED)

        if final_cost is None and self.require_final_cost:
            raise InvalidArgument("Final cost is required to complete an appointment")
        if final_cost is not None and final_cost < 0:
            raise InvalidArgument("Final cost cannot be negative")

        appointment.status = target.value
        appointment.progress_percentage = 100
        appointment.completed_at = self.clock()
        if final_cost is not None:
            appointment.final_cost = final_cost
        if employee_notes is not None:
            appointment.employee_notes = employee_notes
        appointment = self._commit(appointment)
        logger.info(f"✅ Appointment {appointment.id} completed (final cost: {appointment.final_cost})")
        return to_summary(appointment)
