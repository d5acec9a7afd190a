from .router import router
from .service import DashboardService

__all__ = ["DashboardService", "router"]
