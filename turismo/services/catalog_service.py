import math
import re
from typing import Any, Dict, Optional, Tuple

from turismo.core import BaseService, NotFoundError
from turismo.infrastructure.repositories import PackageRepository
from turismo.models import Package
from turismo.services import pricing
from turismo.services.normalizers import SLUG_PATTERN, absolute_media
from turismo.timeutils import Clock, as_utc, utcnow

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
# Pages past this are empty anyway; OFFSET must fit a 64-bit integer
MAX_PAGE = 100_000
MIN_DURATION = 1
MAX_DURATION = 240
SHORT_DESCRIPTION = 200

SORTS = ("recent", "price_asc", "price_desc")


# ---------- query string helpers ----------

def parse_page(value: Any, default: int = 1) -> int:
    try:
        page = int(value)
    except (TypeError, ValueError):
        return default
    if page <= 0:
        return default
    return min(page, MAX_PAGE)


def parse_limit(value: Any, default: int = DEFAULT_LIMIT) -> int:
    try:
        limit = int(value)
    except (TypeError, ValueError):
        limit = default
    if limit <= 0:
        limit = default
    return min(MAX_LIMIT, max(1, limit))


def page_window(page: Any, limit: Any) -> Tuple[int, int, int]:
    """Return ``(page, limit, skip)``"""
    page, limit = parse_page(page), parse_limit(limit)
    return page, limit, (page - 1) * limit


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def _to_number(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_max_duration(value: Any) -> Optional[int]:
    """Hours bound for ``maxDur``, clamped to the duration a package may have"""
    number = _to_number(value)
    if number is None:
        return None
    return int(min(MAX_DURATION, max(MIN_DURATION, number)))


def parse_promo(value: Optional[str]) -> Optional[str]:
    """``any`` or ``active``; anything unrecognised disables the filter"""
    if value is None:
        return None
    value = str(value).strip().lower()
    if value == "any":
        return "any"
    if value in ("active", "true", "1"):
        return "active"
    return None


def parse_bool(value: Optional[str]) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    value = str(value).strip().lower()
    if value in ("true", "1"):
        return True
    if value in ("false", "0"):
        return False
    return None


# ---------- read model ----------

def short_description(text: Optional[str]) -> str:
    text = re.sub(r"\s+", " ", text or "").strip()
    if len(text) <= SHORT_DESCRIPTION:
        return text
    return f"{text[:SHORT_DESCRIPTION - 3]}…"


def serialize_package(package: Package, now, base_url: str = "") -> Dict[str, Any]:
    """Package row plus the derived read-time fields; media urls made absolute"""
    media = absolute_media(base_url, package.media) if base_url else list(package.media or [])
    main_image = next((m["url"] for m in media if m.get("type") == "image" and m.get("url")), None)
    main_video = next((m["url"] for m in media if m.get("type") == "video" and m.get("url")), None)
    has_location = package.latitude is not None and package.longitude is not None

    return {
        "id": package.id,
        "title": package.title,
        "slug": package.slug,
        "description": package.description,
        "short_description": short_description(package.description),
        "city": package.city,
        "country": package.country,
        "category": package.category,
        "price": package.price,
        "currency": package.currency,
        "duration_hours": package.duration_hours,
        "languages": list(package.languages or []),
        "highlights": list(package.highlights or []),
        "includes": list(package.includes or []),
        "excludes": list(package.excludes or []),
        "media": media,
        "main_image": main_image,
        "main_video": main_video,
        "location": {"lat": package.latitude, "lng": package.longitude} if has_location else None,
        "has_location": has_location,
        "is_promo": package.is_promo,
        "promo_percent": package.promo_percent,
        "promo_price": package.promo_price,
        "promo_start_at": as_utc(package.promo_start_at),
        "promo_end_at": as_utc(package.promo_end_at),
        "is_promo_active": pricing.is_promo_active(package, now),
        "effective_price": pricing.effective_price(package, now),
        "discount_percent": pricing.discount_percent(package, now),
        "active": package.active,
        "created_at": as_utc(package.created_at),
        "updated_at": as_utc(package.updated_at),
    }


class CatalogQueryService(BaseService):
    """Public catalog reads: filtering, sorting, pagination and serialization"""

    def __init__(
        self,
        session,
        package_repository: Optional[PackageRepository] = None,
        clock: Clock = utcnow,
        base_url: str = "",
    ):
        super().__init__(session)
        self.package_repository = package_repository or PackageRepository(session)
        self.clock = clock
        self.base_url = base_url

    def serialize(self, package: Package, now=None) -> Dict[str, Any]:
        return serialize_package(package, now or self.clock(), self.base_url)

    async def list_packages(
        self,
        *,
        q: Optional[str] = None,
        city: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Any = None,
        max_price: Any = None,
        max_duration: Any = None,
        sort: Optional[str] = None,
        promo: Optional[str] = None,
        page: Any = None,
        limit: Any = None,
        preview: bool = False,
        active: Any = None,
    ) -> Dict[str, Any]:
        """List packages.

        Public callers only ever see active packages. With ``preview`` the
        ``active`` filter is caller controlled and omitted means "all".
        """
        page, limit, skip = page_window(page, limit)
        now = as_utc(self.clock())

        items, total = await self.package_repository.search(
            now=now,
            q=q or None,
            city=city or None,
            category=category or None,
            min_price=_to_number(min_price),
            max_price=_to_number(max_price),
            max_duration=parse_max_duration(max_duration),
            promo=parse_promo(promo),
            active=parse_bool(active) if preview else True,
            sort=sort if sort in SORTS else "recent",
            skip=skip,
            limit=limit,
        )
        return {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": page_count(total, limit),
            "items": [self.serialize(p, now) for p in items],
        }

    async def get_by_slug(self, slug: str, *, preview: bool = False) -> Dict[str, Any]:
        slug = (slug or "").strip()
        if not SLUG_PATTERN.match(slug):
            raise NotFoundError("Package", slug, message="Package not found")
        package = await self.package_repository.get_by_slug(slug)
        if not package or (not package.active and not preview):
            raise NotFoundError("Package", slug, message="Package not found")
        return self.serialize(package)

    async def get_bookable(self, package_id: str) -> Package:
        """Active package by id, the only kind a booking may reference"""
        package = await self.package_repository.get_active(package_id)
        if not package:
            raise NotFoundError("Package", package_id, message="Package not found or inactive")
        return package
