"""Capability checks over the principal's role"""

from ...models import Appointment, User


def can_view(principal: User, appointment: Appointment) -> bool:
    """Owners see their own appointments; employees may view any appointment"""
    if principal.is_employee:
        return True
    return appointment.customer_id == principal.id


def can_mutate(principal: User, appointment: Appointment) -> bool:
    """Only the owning customer edits, cancels or deletes"""
    return appointment.customer_id == principal.id


def can_work(principal: User, appointment: Appointment) -> bool:
    """Employees work on unassigned appointments or the ones assigned to them"""
    if not principal.is_employee:
        return False
    return appointment.assigned_employee_id in (None, principal.id)
