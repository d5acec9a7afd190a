"""Dashboard schemas"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class CustomerDashboardCounts(BaseModel):
    total: int
    active: int
    completed: int
    vehicles: int
    # None when the customer has no completed appointment yet
    total_spent: Optional[Decimal] = None


class EmployeeDashboardCounts(BaseModel):
    assigned: int
    in_progress: int
    completed: int
