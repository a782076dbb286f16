import logging
import re
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from turismo.core import BaseService, NotFoundError, ValidationError, get_settings
from turismo.infrastructure.repositories import BookingRepository
from turismo.models import Booking, Package
from turismo.services.catalog_service import CatalogQueryService, page_window, page_count
from turismo.services.notification_service import BookingNotice, Notifier
from turismo.services.pricing import quantize_money, to_decimal
from turismo.statuses import BookingStatus, ensure_transition
from turismo.timeutils import Clock, as_utc, parse_timezone, utcnow

logger = logging.getLogger(__name__)

_BARE_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


def parse_tour_date(value: Any, tz) -> datetime:
    """Resolve the requested tour date to an aware UTC datetime.

    A bare ``YYYY-MM-DD`` is midnight in *tz*; a naive timestamp is read in
    *tz* as well.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time())
    else:
        raw = str(value or "").strip()
        if not raw:
            raise ValidationError("Date is required", field="date")
        match = _BARE_DATE.match(raw)
        try:
            if match:
                parsed = datetime.combine(date(*map(int, match.groups())), time())
            else:
                if raw.endswith(("Z", "z")):
                    raw = f"{raw[:-1]}+00:00"
                parsed = datetime.fromisoformat(raw)
        except ValueError:
            raise ValidationError("Invalid date", field="date")

    if parsed.tzinfo is None:
        parsed = tz.localize(parsed)
    return as_utc(parsed)


def ensure_not_past(when: datetime, now: datetime, tz) -> None:
    """Reject a date whose calendar day in *tz* is before today's there"""
    if as_utc(when).astimezone(tz).date() < as_utc(now).astimezone(tz).date():
        raise ValidationError("Date cannot be in the past", field="date")


def compute_total(price: Any, adults: int, children: int) -> Decimal:
    """Base price per person; promotions do not apply to the booked total"""
    return quantize_money((to_decimal(price) or Decimal("0")) * (adults + children))


def _count(value: Any, default: int, minimum: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        number = default
    return max(minimum, number)


class BookingService(BaseService):
    """Booking creation, status lifecycle and operator listing"""

    def __init__(
        self,
        session,
        booking_repository: Optional[BookingRepository] = None,
        catalog: Optional[CatalogQueryService] = None,
        notifier: Optional[Notifier] = None,
        clock: Clock = utcnow,
        timezone: Optional[str] = None,
    ):
        super().__init__(session)
        self.booking_repository = booking_repository or BookingRepository(session)
        self.catalog = catalog or CatalogQueryService(session, clock=clock)
        self.notifier = notifier
        self.clock = clock
        self.tz = parse_timezone(timezone or get_settings().BUSINESS_TIMEZONE)

    async def create_booking(self, data: Dict[str, Any]) -> Tuple[Booking, Package]:
        """Create a Pending booking priced from the stored package.

        Any client supplied total is ignored.
        """
        package = await self.catalog.get_bookable(data.get("package_id"))

        when = parse_tour_date(data.get("date"), self.tz)
        ensure_not_past(when, self.clock(), self.tz)

        people = data.get("people") or {}
        adults = _count(people.get("adults"), 1, 1)
        children = _count(people.get("children"), 0, 0)

        customer = data.get("customer") or {}
        name = str(customer.get("name") or "").strip()
        email = str(customer.get("email") or "").strip().lower()
        if not name:
            raise ValidationError("Customer name is required", field="customer.name")
        if not email:
            raise ValidationError("Customer email is required", field="customer.email")

        notes = (data.get("notes") or "").strip() or None

        booking = await self.booking_repository.create(obj_in={
            "package_id": package.id,
            "status": BookingStatus.pending.value,
            "date": when,
            "adults": adults,
            "children": children,
            "customer_name": name,
            "customer_email": email,
            "customer_phone": (customer.get("phone") or "").strip() or None,
            "customer_country": (customer.get("country") or "").strip() or None,
            "customer_language": (customer.get("language") or "es").strip().lower() or "es",
            "notes": notes,
            "total_price": compute_total(package.price, adults, children),
            "currency": package.currency,
        })
        logger.info(
            "Booking %s created for package %s (%d+%d people)",
            booking.id, package.id, adults, children,
        )
        return booking, package

    async def get_booking(self, booking_id: str) -> Tuple[Booking, Optional[Package]]:
        row = await self.booking_repository.get_with_package(booking_id)
        if not row:
            raise NotFoundError("Booking", booking_id, message="Booking not found")
        return row

    async def change_status(self, booking_id: str, status: Any) -> Tuple[Booking, Optional[Package]]:
        booking, package = await self.get_booking(booking_id)
        target = ensure_transition(booking.status, status)
        if booking.status != target.value:
            booking.status = target.value
            await self.session.flush()
            logger.info("Booking %s moved to %s", booking_id, target.value)
        return booking, package

    async def list_bookings(self, *, page: Any = None, limit: Any = None) -> Dict[str, Any]:
        page, limit, skip = page_window(page, limit)
        rows = await self.booking_repository.list_with_packages(skip=skip, limit=limit)
        total = await self.booking_repository.count()
        return {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": page_count(total, limit),
            "items": rows,
        }

    # ------------------------------------------------------------------
    # Notification hand-off
    # ------------------------------------------------------------------
    @staticmethod
    def build_notice(booking: Booking, package: Package) -> BookingNotice:
        """Plain snapshot for the notifier; safe to use after the session closes"""
        return BookingNotice(
            booking_id=booking.id,
            status=booking.status,
            date=as_utc(booking.date),
            adults=booking.adults,
            children=booking.children,
            customer_name=booking.customer_name,
            customer_email=booking.customer_email,
            customer_phone=booking.customer_phone,
            customer_country=booking.customer_country,
            customer_language=booking.customer_language,
            notes=booking.notes,
            total_price=booking.total_price,
            currency=booking.currency,
            package_id=package.id,
            package_title=package.title,
            package_slug=package.slug,
            package_city=package.city,
        )

    async def notify(self, notice: BookingNotice) -> None:
        """Best effort: a failure here is logged and never reaches the caller"""
        if self.notifier is None:
            logger.debug("No notifier configured, skipping booking %s", notice.booking_id)
            return
        try:
            await self.notifier.booking_created(notice)
            logger.info("Booking %s notification dispatched", notice.booking_id)
        except Exception:
            logger.exception("Booking %s notification failed", notice.booking_id)
