"""Appointment domain schemas - Pydantic models for validation"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import clean_notes, to_local_naive


class AppointmentCreate(BaseModel):
    """Schema for booking a new appointment"""

    vehicle_id: int
    scheduled_date_time: datetime
    service_ids: list[int] = Field(default_factory=list)
    customer_notes: Optional[str] = None

    @field_validator("scheduled_date_time")
    @classmethod
    def normalize_time(cls, v):
        return to_local_naive(v)

    @field_validator("service_ids")
    @classmethod
    def dedupe_services(cls, v):
        # Keep first occurrence order
        return list(dict.fromkeys(v))

    @field_validator("customer_notes")
    @classmethod
    def validate_notes(cls, v):
        return clean_notes(v)


class AppointmentUpdate(BaseModel):
    """Schema for editing notes or schedule of an existing appointment"""

    customer_notes: Optional[str] = None
    scheduled_date_time: Optional[datetime] = None

    @field_validator("scheduled_date_time")
    @classmethod
    def normalize_time(cls, v):
        if v is None:
            return v
        return to_local_naive(v)

    @field_validator("customer_notes")
    @classmethod
    def validate_notes(cls, v):
        return clean_notes(v)


class AppointmentReschedule(BaseModel):
    """Schema for moving a SCHEDULED appointment to a new time"""

    scheduled_date_time: datetime

    @field_validator("scheduled_date_time")
    @classmethod
    def normalize_time(cls, v):
        return to_local_naive(v)


class ProgressUpdate(BaseModel):
    progress_percentage: int
    employee_notes: Optional[str] = None

    @field_validator("employee_notes")
    @classmethod
    def validate_notes(cls, v):
        return clean_notes(v)


class CompleteAppointmentRequest(BaseModel):
    final_cost: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    employee_notes: Optional[str] = None

    @field_validator("employee_notes")
    @classmethod
    def validate_notes(cls, v):
        return clean_notes(v)


class ServiceSummary(BaseModel):
    """Read-only view of a catalog item attached to an appointment"""

    id: int
    name: str
    category: str
    base_price: Decimal
    estimated_duration_minutes: int

    class Config:
        from_attributes = True


class AppointmentSummary(BaseModel):
    """Schema for appointment response"""

    id: int
    customer_email: str
    vehicle_id: int
    vehicle_registration_number: Optional[str] = None
    assigned_employee_email: Optional[str] = None
    scheduled_date_time: datetime
    status: str
    customer_notes: Optional[str] = None
    employee_notes: Optional[str] = None
    progress_percentage: int = 0
    final_cost: Optional[Decimal] = None
    estimated_cost: Decimal
    services: list[ServiceSummary] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
