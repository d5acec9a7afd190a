"""Cost and read-side projections for appointments"""

from decimal import Decimal
from typing import Iterable

from ...models import Appointment, ServiceItem
from .schemas import AppointmentSummary, ServiceSummary


def estimated_cost(services: Iterable[ServiceItem]) -> Decimal:
    """Exact decimal sum of base prices"""
    return sum((Decimal(s.base_price) for s in services), Decimal("0"))


def service_summary(service: ServiceItem) -> ServiceSummary:
    return ServiceSummary(
        id=service.id,
        name=service.name,
        category=service.category,
        base_price=service.base_price,
        estimated_duration_minutes=service.estimated_duration_minutes,
    )


def to_summary(appointment: Appointment) -> AppointmentSummary:
    """Flatten an appointment with its services into the response projection"""
    services = sorted(appointment.services, key=lambda s: s.id)
    return AppointmentSummary(
        id=appointment.id,
        customer_email=appointment.customer.email,
        vehicle_id=appointment.vehicle_id,
        vehicle_registration_number=(
            appointment.vehicle.registration_number if appointment.vehicle else None
        ),
        assigned_employee_email=(
            appointment.assigned_employee.email if appointment.assigned_employee else None
        ),
        scheduled_date_time=appointment.scheduled_date_time,
        status=appointment.status,
        customer_notes=appointment.customer_notes,
        employee_notes=appointment.employee_notes,
        progress_percentage=appointment.progress_percentage or 0,
        final_cost=appointment.final_cost,
        estimated_cost=estimated_cost(services),
        services=[service_summary(s) for s in services],
        created_at=appointment.created_at,
        updated_at=appointment.updated_at,
    )
