"""Dashboard service - Read-only aggregations scoped to the caller"""

import logging
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...errors import ResourceNotFound
from ...models import User
from ..appointments.lifecycle import AppointmentStatus
from ..appointments.pricing import to_summary
from ..appointments.repository import AppointmentRepository
from ..appointments.schemas import AppointmentSummary
from ..identity import IdentityRepository
from .schemas import CustomerDashboardCounts, EmployeeDashboardCounts

logger = logging.getLogger(__name__)


def start_of_next_day(now: datetime) -> datetime:
    """Midnight at the beginning of the calendar day after `now`"""
    return datetime.combine(now.date() + timedelta(days=1), time.min)


class DashboardService:
    """Counts, sums and upcoming projections for dashboards"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.now):
        self.db = db
        self.clock = clock
        self.repo = AppointmentRepository()
        self.identity = IdentityRepository()

    def _get_customer(self, email: str) -> User:
        user = self.identity.get_user_by_email(self.db, email)
        if not user:
            raise ResourceNotFound("Customer not found")
        return user

    # Customer dashboard
    def appointment_count(self, customer_email: str) -> int:
        customer = self._get_customer(customer_email)
        return self.repo.count_by_customer_email(self.db, customer.email)

    def active_appointment_count(self, customer_email: str) -> int:
        customer = self._get_customer(customer_email)
        return self.repo.count_by_customer_email_and_status(
            self.db, customer.email, AppointmentStatus.IN_PROGRESS.value
        )

    def completed_services_count(self, customer_email: str) -> int:
        customer = self._get_customer(customer_email)
        return self.repo.count_by_customer_email_and_status(
            self.db, customer.email, AppointmentStatus.COMPLETED.value
        )

    def vehicle_count(self, customer_email: str) -> int:
        customer = self._get_customer(customer_email)
        return self.identity.count_vehicles_by_owner_email(self.db, customer.email)

    def total_spent(self, customer_email: str) -> Optional[Decimal]:
        customer = self._get_customer(customer_email)
        return self.repo.sum_spent_by_customer_completed(self.db, customer.email)

    def counts(self, customer_email: str) -> CustomerDashboardCounts:
        """All customer counters in one round"""
        customer = self._get_customer(customer_email)
        email = customer.email
        return CustomerDashboardCounts(
            total=self.repo.count_by_customer_email(self.db, email),
            active=self.repo.count_by_customer_email_and_status(
                self.db, email, AppointmentStatus.IN_PROGRESS.value
            ),
            completed=self.repo.count_by_customer_email_and_status(
                self.db, email, AppointmentStatus.COMPLETED.value
            ),
            vehicles=self.identity.count_vehicles_by_owner_email(self.db, email),
            total_spent=self.repo.sum_spent_by_customer_completed(self.db, email),
        )

    def upcoming_appointments(self, customer_email: str) -> list[AppointmentSummary]:
        """Appointments from tomorrow onwards; today's are left out"""
        customer = self._get_customer(customer_email)
        start = start_of_next_day(self.clock())
        appointments = self.repo.list_by_customer_from(self.db, customer.id, start)
        logger.debug(f"📅 {len(appointments)} upcoming appointments for user {customer.id}")
        return [to_summary(a) for a in appointments]

    # Employee dashboard
    def employee_counts(self, employee_email: str) -> EmployeeDashboardCounts:
        employee = self.identity.get_user_by_email(self.db, employee_email)
        if not employee:
            raise ResourceNotFound("Employee not found")
        email = employee.email
        return EmployeeDashboardCounts(
            assigned=self.repo.count_by_assigned_employee_email(self.db, email),
            in_progress=self.repo.count_by_assigned_employee_email(
                self.db, email, AppointmentStatus.IN_PROGRESS.value
            ),
            completed=self.repo.count_by_assigned_employee_email(
                self.db, email, AppointmentStatus.COMPLETED.value
            ),
        )
