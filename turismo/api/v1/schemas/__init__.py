from .common import CamelModel, Page, OkResponse
from .package_schemas import (
    PackageIn, PackageUpdate, PackageOut, PackageDeleted, MediaItem, Location,
)
from .booking_schemas import BookingIn, BookingOut, BookingStatusUpdate, PackageSummary
from .auth_schemas import (
    LoginRequest, LoginResponse, RefreshTokenRequest, TokenResponse, UserOut
)
from .contact_schemas import ContactIn, ContactOut
from .upload_schemas import UploadOut, UploadedFile

__all__ = [
    # Common
    "CamelModel",
    "Page",
    "OkResponse",

    # Package schemas
    "PackageIn",
    "PackageUpdate",
    "PackageOut",
    "PackageDeleted",
    "MediaItem",
    "Location",

    # Booking schemas
    "BookingIn",
    "BookingOut",
    "BookingStatusUpdate",
    "PackageSummary",

    # Auth schemas
    "LoginRequest",
    "LoginResponse",
    "RefreshTokenRequest",
    "TokenResponse",
    "UserOut",

    # Contact / uploads
    "ContactIn",
    "ContactOut",
    "UploadOut",
    "UploadedFile",
]
