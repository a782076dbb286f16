from sqlalchemy import (
    String, Integer, Numeric, DateTime, Boolean, Text, JSON, Index,
)
from sqlalchemy.orm import mapped_column, DeclarativeBase
from .roles import Role
from .statuses import BookingStatus
from .timeutils import utcnow
import uuid


# Opaque string ids for catalog and booking documents
def _gen_id() -> str:
    """Return random 32-char hex id."""
    return uuid.uuid4().hex


class Base(DeclarativeBase): ...


# ---------- Operators ----------
class User(Base):
    __tablename__ = "users"
    id            = mapped_column(Integer, primary_key=True)
    name          = mapped_column(String(120), nullable=False)
    # Always stored lowercase
    email         = mapped_column(String(254), unique=True, nullable=False)
    password_hash = mapped_column(String(128), nullable=False)
    role          = mapped_column(String(16), default=Role.agent.value, nullable=False)
    active        = mapped_column(Boolean, default=True, nullable=False)
    phone         = mapped_column(String(40), nullable=True)
    last_login_at = mapped_column(DateTime(timezone=True), nullable=True)
    created_at    = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


# ---------- Catalog ----------
class Package(Base):
    __tablename__ = "packages"
    id             = mapped_column(String(32), primary_key=True, default=_gen_id)
    title          = mapped_column(String(200), nullable=False)
    slug           = mapped_column(String(220), unique=True, nullable=False)
    description    = mapped_column(Text, default="", nullable=False)
    city           = mapped_column(String(80), default="Puno", nullable=False)
    country        = mapped_column(String(80), default="Peru", nullable=False)
    category       = mapped_column(String(80), default="Tour", nullable=False)
    price          = mapped_column(Numeric(12, 2), nullable=False)
    currency       = mapped_column(String(3), default="PEN", nullable=False)
    duration_hours = mapped_column(Integer, default=8, nullable=False)
    languages      = mapped_column(JSON, default=lambda: ["es", "en"], nullable=False)
    highlights     = mapped_column(JSON, default=list, nullable=False)
    includes       = mapped_column(JSON, default=list, nullable=False)
    excludes       = mapped_column(JSON, default=list, nullable=False)
    # Ordered [{type, url, caption?}]; first image is the cover
    media          = mapped_column(JSON, default=list, nullable=False)
    latitude       = mapped_column(Numeric(8, 6), nullable=True)
    longitude      = mapped_column(Numeric(9, 6), nullable=True)
    # -------- Promotion ---------
    is_promo       = mapped_column(Boolean, default=False, nullable=False)
    promo_percent  = mapped_column(Numeric(5, 2), nullable=True)
    promo_price    = mapped_column(Numeric(12, 2), nullable=True)
    promo_start_at = mapped_column(DateTime(timezone=True), nullable=True)
    promo_end_at   = mapped_column(DateTime(timezone=True), nullable=True)

    active         = mapped_column(Boolean, default=True, nullable=False)
    created_at     = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at     = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_packages_active_created", "active", "created_at"),
        Index("ix_packages_city_category_created", "city", "category", "created_at"),
        Index("ix_packages_promo_window", "is_promo", "promo_start_at", "promo_end_at"),
    )


# ---------- Bookings ----------
class Booking(Base):
    __tablename__ = "bookings"
    id                = mapped_column(String(32), primary_key=True, default=_gen_id)
    # Soft reference: deleting a package leaves its bookings untouched
    package_id        = mapped_column(String(32), nullable=False, index=True)
    status            = mapped_column(String(16), default=BookingStatus.pending.value, nullable=False)
    date              = mapped_column(DateTime(timezone=True), nullable=False)
    adults            = mapped_column(Integer, default=1, nullable=False)
    children          = mapped_column(Integer, default=0, nullable=False)
    customer_name     = mapped_column(String(100), nullable=False)
    customer_email    = mapped_column(String(254), nullable=False)
    customer_phone    = mapped_column(String(40), nullable=True)
    customer_country  = mapped_column(String(80), nullable=True)
    customer_language = mapped_column(String(10), default="es", nullable=False)
    notes             = mapped_column(String(1000), nullable=True)
    # Frozen at creation together with the currency it was priced in
    total_price       = mapped_column(Numeric(12, 2), nullable=False)
    currency          = mapped_column(String(3), default="PEN", nullable=False)
    created_at        = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at        = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_bookings_created", "created_at"),
    )
