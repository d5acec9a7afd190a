import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Role(str, enum.Enum):
    CUSTOMER = "CUSTOMER"
    EMPLOYEE = "EMPLOYEE"


appointment_services = Table(
    "appointment_services",
    Base.metadata,
    Column("appointment_id", Integer, ForeignKey("appointments.id", ondelete="CASCADE"), primary_key=True),
    Column("service_id", Integer, ForeignKey("services.id"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    phone_number = Column(String(50), nullable=True)
    role = Column(String(20), default=Role.CUSTOMER.value, nullable=False)  # CUSTOMER, EMPLOYEE
    created_at = Column(DateTime, server_default=func.now())

    vehicles = relationship("Vehicle", back_populates="owner")
    appointments = relationship(
        "Appointment", back_populates="customer", foreign_keys="Appointment.customer_id"
    )

    @property
    def is_employee(self) -> bool:
        return self.role == Role.EMPLOYEE.value


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    registration_number = Column(String(32), unique=True, index=True, nullable=False)
    make = Column(String(100), nullable=True)
    model = Column(String(100), nullable=True)
    year = Column(Integer, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    owner = relationship("User", back_populates="vehicles")


class ServiceItem(Base):
    """Catalog entry for a bookable unit of work (oil change, tire rotation...)"""

    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    category = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)
    base_price = Column(Numeric(10, 2), nullable=False)
    estimated_duration_minutes = Column(Integer, nullable=False)
    # Inactive items stay referenced by historical appointments but cannot be booked
    is_active = Column(Boolean, default=True, nullable=False)


class Appointment(Base):
    __tablename__ = "appointments"
    # Authoritative backstop for the booking-time collision check
    __table_args__ = (
        UniqueConstraint("customer_id", "scheduled_date_time", name="uq_appointment_customer_time"),
    )

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False)
    assigned_employee_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    scheduled_date_time = Column(DateTime, nullable=False, index=True)

    # Status workflow: SCHEDULED → CONFIRMED/RESCHEDULED → IN_PROGRESS → COMPLETED
    # CANCELLED is reachable from every non-terminal state
    status = Column(String(20), default="SCHEDULED", nullable=False, index=True)

    customer_notes = Column(Text, nullable=True)
    employee_notes = Column(Text, nullable=True)
    progress_percentage = Column(Integer, default=0, nullable=False)
    final_cost = Column(Numeric(10, 2), nullable=True)  # Set on completion

    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    customer = relationship("User", back_populates="appointments", foreign_keys=[customer_id])
    assigned_employee = relationship("User", foreign_keys=[assigned_employee_id])
    vehicle = relationship("Vehicle")
    services = relationship(
        "ServiceItem", secondary=appointment_services, collection_class=set, lazy="selectin"
    )
