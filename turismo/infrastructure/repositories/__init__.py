from .package_repository import PackageRepository
from .booking_repository import BookingRepository
from .user_repository import UserRepository

__all__ = [
    "PackageRepository",
    "BookingRepository",
    "UserRepository",
]
