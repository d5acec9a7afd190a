"""Appointment repository - Database operations for appointments"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, aliased

from ...models import Appointment, User
from .lifecycle import AppointmentStatus


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def get_by_id(db: Session, appointment_id: int) -> Optional[Appointment]:
        """Get a specific appointment by ID"""
        return db.query(Appointment).filter(Appointment.id == appointment_id).first()

    @staticmethod
    def list_by_customer_id(db: Session, customer_id: int) -> list[Appointment]:
        """Get all appointments for a customer, earliest first"""
        return (
            db.query(Appointment)
            .filter(Appointment.customer_id == customer_id)
            .order_by(Appointment.scheduled_date_time.asc(), Appointment.id.asc())
            .all()
        )

    @staticmethod
    def exists_for_customer_at(
        db: Session,
        customer_id: int,
        scheduled_date_time: datetime,
        exclude_id: Optional[int] = None,
    ) -> bool:
        """Exact-timestamp collision check for a customer's appointments"""
        query = db.query(Appointment.id).filter(
            Appointment.customer_id == customer_id,
            Appointment.scheduled_date_time == scheduled_date_time,
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return db.query(query.exists()).scalar()

    @staticmethod
    def create(db: Session, **appointment_data) -> Appointment:
        """Create a new appointment"""
        services = appointment_data.pop("services", [])
        appointment = Appointment(**appointment_data)
        appointment.services = set(services)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def save(db: Session, appointment: Appointment) -> Appointment:
        """Persist pending changes on an appointment"""
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def delete_by_id(db: Session, appointment_id: int) -> None:
        """Delete an appointment and flush so the removal is visible in this session"""
        appointment = db.get(Appointment, appointment_id)
        if appointment is not None:
            db.delete(appointment)
        db.flush()
        db.commit()

    # Dashboard queries
    @staticmethod
    def count_by_customer_email(db: Session, email: str) -> int:
        return (
            db.query(func.count(Appointment.id))
            .join(User, Appointment.customer_id == User.id)
            .filter(User.email == email)
            .scalar()
        )

    @staticmethod
    def count_by_customer_email_and_status(db: Session, email: str, status: str) -> int:
        return (
            db.query(func.count(Appointment.id))
            .join(User, Appointment.customer_id == User.id)
            .filter(User.email == email, Appointment.status == status)
            .scalar()
        )

    @staticmethod
    def sum_spent_by_customer_completed(db: Session, email: str) -> Optional[Decimal]:
        """Sum of final costs over COMPLETED appointments; None when there are none"""
        return (
            db.query(func.sum(Appointment.final_cost))
            .join(User, Appointment.customer_id == User.id)
            .filter(User.email == email, Appointment.status == AppointmentStatus.COMPLETED.value)
            .scalar()
        )

    @staticmethod
    def list_by_customer_from(db: Session, customer_id: int, start: datetime) -> list[Appointment]:
        """Appointments at or after `start`, ascending by scheduled time"""
        return (
            db.query(Appointment)
            .filter(
                Appointment.customer_id == customer_id,
                Appointment.scheduled_date_time >= start,
            )
            .order_by(Appointment.scheduled_date_time.asc(), Appointment.id.asc())
            .all()
        )

    @staticmethod
    def count_by_assigned_employee_email(
        db: Session, email: str, status: Optional[str] = None
    ) -> int:
        employee = aliased(User)
        query = (
            db.query(func.count(Appointment.id))
            .join(employee, Appointment.assigned_employee_id == employee.id)
            .filter(employee.email == email)
        )
        if status:
            query = query.filter(Appointment.status == status)
        return query.scalar()
