from .lifecycle import AppointmentStatus, LifecyclePolicy
from .router import employee_router, router
from .service import AppointmentService

__all__ = ["AppointmentService", "AppointmentStatus", "LifecyclePolicy", "employee_router", "router"]
