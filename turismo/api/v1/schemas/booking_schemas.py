from typing import Optional
from datetime import datetime
from pydantic import EmailStr, Field

from .common import CamelModel


class People(CamelModel):
    adults: int = Field(1, ge=1, le=99)
    children: int = Field(0, ge=0, le=99)


class CustomerIn(CamelModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=40)
    country: Optional[str] = Field(None, max_length=80)
    language: str = Field("es", max_length=10)


class BookingIn(CamelModel):
    """Public booking request. A submitted ``totalPrice`` is ignored."""
    package_id: str = Field(..., min_length=1, max_length=64)
    # ISO-8601 timestamp or bare YYYY-MM-DD
    date: str = Field(..., min_length=1, max_length=40)
    people: People = Field(default_factory=People)
    customer: CustomerIn
    notes: Optional[str] = Field(None, max_length=1000)


class BookingStatusUpdate(CamelModel):
    """Schema for updating booking status"""
    status: str


class PeopleOut(CamelModel):
    adults: int
    children: int


class CustomerOut(CamelModel):
    name: str
    email: str
    phone: Optional[str] = None
    country: Optional[str] = None
    language: str


class PackageSummary(CamelModel):
    id: str
    title: str
    slug: str
    city: str
    price: float
    currency: str


class BookingOut(CamelModel):
    """Schema for booking responses"""
    id: str
    package_id: str
    package: Optional[PackageSummary] = None
    status: str
    date: datetime
    people: PeopleOut
    customer: CustomerOut
    notes: Optional[str] = None
    total_price: float
    currency: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, booking, package=None) -> "BookingOut":
        """Build from a Booking row and its package (``None`` once deleted)"""
        from turismo.timeutils import as_utc

        return cls(
            id=booking.id,
            package_id=booking.package_id,
            package=PackageSummary.model_validate(package) if package is not None else None,
            status=booking.status,
            date=as_utc(booking.date),
            people=PeopleOut(adults=booking.adults, children=booking.children),
            customer=CustomerOut(
                name=booking.customer_name,
                email=booking.customer_email,
                phone=booking.customer_phone,
                country=booking.customer_country,
                language=booking.customer_language,
            ),
            notes=booking.notes,
            total_price=booking.total_price,
            currency=booking.currency,
            created_at=as_utc(booking.created_at),
            updated_at=as_utc(booking.updated_at),
        )
