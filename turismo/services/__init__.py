from .package_service import PackageService
from .catalog_service import CatalogQueryService
from .booking_service import BookingService
from .auth_service import AuthService
from .contact_service import ContactService
from .notification_service import Notifier, EmailNotifier, BookingNotice, get_notifier

__all__ = [
    "PackageService",
    "CatalogQueryService",
    "BookingService",
    "AuthService",
    "ContactService",
    "Notifier",
    "EmailNotifier",
    "BookingNotice",
    "get_notifier",
]
