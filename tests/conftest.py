"""Shared fixtures: in-memory database, seeded principals, vehicles and catalog."""
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from autoshop.database import Base
from autoshop.domain.appointments.schemas import AppointmentCreate
from autoshop.domain.appointments.service import AppointmentService
from autoshop.models import Appointment, Role, ServiceItem, User, Vehicle

# Fixed "now" for deterministic scheduling checks
NOW = datetime(2026, 3, 10, 9, 30)


def fixed_clock():
    return NOW


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    """Database session bound to the in-memory engine."""
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed(db):
    """Two customers, two employees, one vehicle each for the customers and a small catalog."""
    customer = User(email="customer@test.com", full_name="John Doe", role=Role.CUSTOMER.value)
    other = User(email="other@test.com", full_name="Ana Lee", role=Role.CUSTOMER.value)
    employee = User(email="employee@test.com", full_name="Jane Smith", role=Role.EMPLOYEE.value)
    employee2 = User(email="employee2@test.com", full_name="Sam Park", role=Role.EMPLOYEE.value)
    db.add_all([customer, other, employee, employee2])
    db.flush()

    vehicle = Vehicle(
        owner_id=customer.id, registration_number="ABC123", make="Toyota", model="Camry", year=2020
    )
    other_vehicle = Vehicle(
        owner_id=other.id, registration_number="XYZ789", make="Honda", model="Civic", year=2018
    )
    oil = ServiceItem(
        name="Oil Change",
        category="MAINTENANCE",
        base_price=Decimal("49.99"),
        estimated_duration_minutes=30,
        is_active=True,
    )
    tires = ServiceItem(
        name="Tire Rotation",
        category="TIRE_SERVICE",
        base_price=Decimal("29.99"),
        estimated_duration_minutes=20,
        is_active=True,
    )
    detailing = ServiceItem(
        name="Detailing",
        category="BODYWORK",
        base_price=Decimal("120.00"),
        estimated_duration_minutes=90,
        is_active=False,
    )
    db.add_all([vehicle, other_vehicle, oil, tires, detailing])
    db.commit()

    return {
        "customer": customer,
        "other": other,
        "employee": employee,
        "employee2": employee2,
        "vehicle": vehicle,
        "other_vehicle": other_vehicle,
        "oil": oil,
        "tires": tires,
        "detailing": detailing,
    }


@pytest.fixture
def service(db):
    return AppointmentService(db, clock=fixed_clock)


@pytest.fixture
def book(service, seed):
    """Factory booking an appointment for the seeded customer."""

    def _book(when=None, service_ids=None, notes=None, email="customer@test.com", vehicle=None):
        data = AppointmentCreate(
            vehicle_id=(vehicle or seed["vehicle"]).id,
            scheduled_date_time=when or NOW + timedelta(days=1),
            service_ids=service_ids if service_ids is not None else [seed["oil"].id],
            customer_notes=notes,
        )
        return service.book(email, data)

    return _book


@pytest.fixture
def set_status(db):
    """Force an appointment into a status, bypassing the lifecycle."""

    def _set(appointment_id, status, **fields):
        appointment = db.get(Appointment, appointment_id)
        appointment.status = status
        for key, value in fields.items():
            setattr(appointment, key, value)
        db.commit()
        return appointment

    return _set
