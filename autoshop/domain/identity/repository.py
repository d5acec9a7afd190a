"""Identity repository - principal, vehicle and catalog lookups"""

from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import ServiceItem, User, Vehicle


class IdentityRepository:
    """Read-only lookups the booking core needs from the identity side"""

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        """Get user by email"""
        return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()

    @staticmethod
    def get_vehicle_by_id(db: Session, vehicle_id: int) -> Optional[Vehicle]:
        """Get vehicle by ID"""
        return db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()

    @staticmethod
    def get_services_by_ids(db: Session, service_ids: Iterable[int]) -> list[ServiceItem]:
        """Batch lookup of catalog items; unknown IDs are simply absent from the result"""
        ids = list(service_ids)
        if not ids:
            return []
        return db.query(ServiceItem).filter(ServiceItem.id.in_(ids)).all()

    @staticmethod
    def count_vehicles_by_owner_email(db: Session, email: str) -> int:
        """Count vehicles owned by the user with this email"""
        return (
            db.query(func.count(Vehicle.id))
            .join(User, Vehicle.owner_id == User.id)
            .filter(func.lower(User.email) == email.strip().lower())
            .scalar()
        )
