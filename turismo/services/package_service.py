import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from sqlalchemy.exc import IntegrityError

from turismo.core import (
    BaseService, NotFoundError, ValidationError, ConflictError, get_settings,
)
from turismo.infrastructure.repositories import PackageRepository
from turismo.models import Package
from turismo.services import normalizers as norm
from turismo.services.pricing import to_decimal
from turismo.timeutils import as_utc

logger = logging.getLogger(__name__)

SLUG_ATTEMPTS = 5

# Columns an operator may set; anything else in the payload is ignored
EDITABLE_FIELDS = (
    "title", "description",
    "price", "currency",
    "city", "country", "category",
    "duration_hours",
    "languages",
    "highlights", "includes", "excludes",
    "media",
    "active",
    "location",
    "is_promo", "promo_percent", "promo_price", "promo_start_at", "promo_end_at",
)

# May be cleared with an explicit null
NULLABLE_FIELDS = {"location", "promo_percent", "promo_price", "promo_start_at", "promo_end_at"}


def is_slug_conflict(exc: IntegrityError) -> bool:
    """True when *exc* is the unique index on ``packages.slug``.

    SQLite reports ``packages.slug``, PostgreSQL the ``packages_slug_key`` constraint.
    """
    return "slug" in str(getattr(exc, "orig", exc)).lower()


class PackageService(BaseService):
    """Package catalog writes: normalization, slugs and lifecycle"""

    def __init__(
        self,
        session,
        package_repository: Optional[PackageRepository] = None,
        strict: Optional[bool] = None,
    ):
        super().__init__(session)
        self.package_repository = package_repository or PackageRepository(session)
        self.strict = get_settings().strict_validation if strict is None else strict

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------
    def _normalize(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Map an incoming payload onto column values"""
        out: Dict[str, Any] = {}
        for key in EDITABLE_FIELDS:
            if key not in data:
                continue
            value = data[key]
            if value is None and key not in NULLABLE_FIELDS:
                continue

            if key == "currency":
                out[key] = norm.normalize_currency(value, strict=self.strict)
            elif key == "city":
                out[key] = norm.normalize_city(value, strict=self.strict)
            elif key == "languages":
                out[key] = norm.normalize_languages(value)
            elif key in ("highlights", "includes", "excludes"):
                out[key] = norm.clean_string_list(value)
            elif key == "media":
                out[key] = norm.normalize_media(value)
            elif key == "price":
                price = to_decimal(value)
                if price is None or price < 0:
                    raise ValidationError("Price must be a non-negative number", field="price")
                out[key] = price
            elif key == "promo_percent":
                out[key] = norm.clamp_percent(value)
            elif key == "promo_price":
                out[key] = norm.clamp_non_negative(value)
            elif key in ("promo_start_at", "promo_end_at"):
                out[key] = as_utc(value)
            elif key == "location":
                out.update(self._normalize_location(value))
            elif key in ("title", "description", "country", "category"):
                out[key] = str(value).strip()
            else:
                out[key] = value
        return out

    @staticmethod
    def _normalize_location(value: Any) -> Dict[str, Any]:
        if hasattr(value, "model_dump"):
            value = value.model_dump()
        if not value:
            return {"latitude": None, "longitude": None}
        lat = to_decimal(value.get("lat"))
        lng = to_decimal(value.get("lng"))
        if lat is None or lng is None:
            return {"latitude": None, "longitude": None}
        if not (-90 <= lat <= 90) or not (-180 <= lng <= 180):
            raise ValidationError("Location out of range", field="location")
        return {"latitude": lat, "longitude": lng}

    @staticmethod
    def _order_promo_window(package: Package) -> None:
        package.promo_start_at, package.promo_end_at = norm.order_window(
            package.promo_start_at, package.promo_end_at
        )

    # ------------------------------------------------------------------
    # Slugs
    # ------------------------------------------------------------------
    async def unique_slug(self, title: str, exclude_id: Optional[str] = None) -> str:
        """First free slug among ``base``, ``base-2``, ``base-3``..."""
        base = norm.slug_base(title)
        attempt = 1
        candidate = base
        while await self.package_repository.slug_exists(candidate, exclude_id=exclude_id):
            attempt += 1
            candidate = norm.slug_candidate(base, attempt)
        return candidate

    async def _save(self, build: Callable[[], Awaitable[Package]]) -> Package:
        """Run *build* and flush; a concurrent slug claim rolls back and rebuilds"""
        for attempt in range(1, SLUG_ATTEMPTS + 1):
            package = await build()
            slug = package.slug
            try:
                await self.session.flush()
                return package
            except IntegrityError as exc:
                if not is_slug_conflict(exc):
                    raise
                await self.session.rollback()
                logger.warning(
                    "Slug %r taken concurrently, retrying (%d/%d)", slug, attempt, SLUG_ATTEMPTS
                )
        raise ConflictError("Could not assign a unique slug, try again")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    async def get_package(self, package_id: str) -> Package:
        package = await self.package_repository.get(package_id)
        if not package:
            raise NotFoundError("Package", package_id, message="Package not found")
        return package

    async def create_package(self, data: Dict[str, Any]) -> Package:
        values = self._normalize(data)
        if not values.get("title"):
            raise ValidationError("Title is required", field="title")
        if values.get("price") is None:
            raise ValidationError("Price is required", field="price")

        async def build() -> Package:
            package = Package(**values)
            self._order_promo_window(package)
            package.slug = await self.unique_slug(values["title"])
            self.session.add(package)
            return package

        package = await self._save(build)
        logger.info("Package %s created with slug %s", package.id, package.slug)
        return package

    async def update_package(self, package_id: str, data: Dict[str, Any]) -> Package:
        values = self._normalize(data)
        if "title" in values and not values["title"]:
            raise ValidationError("Title cannot be empty", field="title")

        async def build() -> Package:
            package = await self.get_package(package_id)
            for field, value in values.items():
                setattr(package, field, value)
            self._order_promo_window(package)
            if values.get("title"):
                package.slug = await self.unique_slug(values["title"], exclude_id=package.id)
            return package

        return await self._save(build)

    async def deactivate_package(self, package_id: str) -> Package:
        package = await self.get_package(package_id)
        package.active = False
        await self.session.flush()
        logger.info("Package %s deactivated", package_id)
        return package

    async def delete_package(self, package_id: str) -> str:
        """Hard delete; bookings keep their soft reference"""
        if not await self.package_repository.delete(id=package_id):
            raise NotFoundError("Package", package_id, message="Package not found")
        logger.info("Package %s deleted", package_id)
        return package_id
