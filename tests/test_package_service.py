from datetime import datetime, timezone
from decimal import Decimal

import pytest

from sqlalchemy.exc import IntegrityError

from turismo.core import ConflictError, NotFoundError, ValidationError
from turismo.infrastructure.repositories import PackageRepository
from turismo.services import PackageService
from turismo.services.package_service import SLUG_ATTEMPTS, is_slug_conflict


@pytest.fixture
def service(session) -> PackageService:
    """Package writes in lenient validation mode"""
    return PackageService(session, strict=False)


async def test_create_derives_slug_and_defaults(service):
    package = await service.create_package({"title": "Uros Islands", "price": Decimal("50")})

    assert package.slug == "uros-islands"
    assert package.city == "Puno"
    assert package.currency == "PEN"
    assert package.active is True
    assert package.id


async def test_same_title_gets_numbered_slug(service):
    first = await service.create_package({"title": "Uros Islands", "price": 50})
    second = await service.create_package({"title": "Uros Islands", "price": 60})
    third = await service.create_package({"title": "Uros  islands!", "price": 70})

    assert first.slug == "uros-islands"
    assert second.slug == "uros-islands-2"
    assert third.slug == "uros-islands-3"


async def test_update_keeps_own_slug(service):
    package = await service.create_package({"title": "Uros Islands", "price": 50})

    updated = await service.update_package(package.id, {"title": "Uros Islands", "price": 55})

    assert updated.slug == "uros-islands"
    assert updated.price == Decimal("55")


async def test_update_with_new_title_reslugs(service):
    await service.create_package({"title": "Taquile", "price": 40})
    package = await service.create_package({"title": "Amantani", "price": 40})

    updated = await service.update_package(package.id, {"title": "Taquile"})

    assert updated.slug == "taquile-2"


async def test_update_without_title_keeps_slug(service):
    package = await service.create_package({"title": "Sillustani", "price": 30})

    updated = await service.update_package(package.id, {"description": "Chullpas at sunset"})

    assert updated.slug == "sillustani"
    assert updated.description == "Chullpas at sunset"


async def test_promo_values_are_clamped_and_window_ordered(service):
    start = datetime(2026, 4, 1, tzinfo=timezone.utc)
    end = datetime(2026, 3, 1, tzinfo=timezone.utc)

    package = await service.create_package({
        "title": "Promo Tour",
        "price": 100,
        "is_promo": True,
        "promo_percent": 150,
        "promo_price": -5,
        "promo_start_at": start,
        "promo_end_at": end,
    })

    assert package.promo_percent == Decimal("100")
    assert package.promo_price == Decimal("0")
    assert package.promo_start_at == end
    assert package.promo_end_at == start


async def test_lists_media_and_location_are_normalized(service):
    package = await service.create_package({
        "title": "Lake Titicaca",
        "price": 80,
        "highlights": "Reed islands\n\nBoat ride\nReed islands",
        "languages": "ES, EN",
        "media": [{"type": "video", "url": "/v.mp4"}, {"url": ""}],
        "location": {"lat": -15.84, "lng": -70.02},
        "city": "cusco",
        "currency": "eur",
    })

    assert package.highlights == ["Reed islands", "Boat ride"]
    assert package.languages == ["es", "en"]
    assert package.media == [{"type": "video", "url": "/v.mp4"}]
    assert package.latitude == Decimal("-15.84")
    assert package.city == "Cusco"
    assert package.currency == "EUR"


async def test_location_can_be_cleared(service):
    package = await service.create_package({
        "title": "Chucuito", "price": 20, "location": {"lat": 1, "lng": 2},
    })

    updated = await service.update_package(package.id, {"location": None})

    assert updated.latitude is None
    assert updated.longitude is None


async def test_location_out_of_range(service):
    with pytest.raises(ValidationError) as exc:
        await service.create_package({"title": "Nowhere", "price": 1, "location": {"lat": 95, "lng": 0}})
    assert exc.value.field == "location"


async def test_strict_mode_rejects_unknown_city(session):
    service = PackageService(session, strict=True)

    with pytest.raises(ValidationError) as exc:
        await service.create_package({"title": "Tokyo Walk", "price": 10, "city": "Tokyo"})
    assert exc.value.field == "city"


async def test_create_requires_title_and_price(service):
    with pytest.raises(ValidationError):
        await service.create_package({"title": "  ", "price": 10})
    with pytest.raises(ValidationError) as exc:
        await service.create_package({"title": "No price"})
    assert exc.value.field == "price"


async def test_deactivate_and_delete(service):
    package = await service.create_package({"title": "Puno City", "price": 25})

    assert (await service.deactivate_package(package.id)).active is False
    assert await service.delete_package(package.id) == package.id
    with pytest.raises(NotFoundError):
        await service.get_package(package.id)
    with pytest.raises(NotFoundError):
        await service.delete_package(package.id)


async def test_concurrent_slug_claim_retries_with_next_suffix(session, service, monkeypatch):
    await service.create_package({"title": "Uros Islands", "price": 50})
    await session.commit()

    real_slug_exists = PackageRepository.slug_exists
    probes = []

    async def stale_first_lookup(self, slug, *, exclude_id=None):
        # First lookup misses the committed row, as if another writer won the race
        probes.append(slug)
        if len(probes) == 1:
            return False
        return await real_slug_exists(self, slug, exclude_id=exclude_id)

    monkeypatch.setattr(PackageRepository, "slug_exists", stale_first_lookup)

    package = await service.create_package({"title": "Uros Islands", "price": 60})

    assert package.slug == "uros-islands-2"
    assert probes[:2] == ["uros-islands", "uros-islands"]


async def test_slug_retries_run_out_with_conflict(session, service, monkeypatch):
    await service.create_package({"title": "Uros Islands", "price": 50})
    await session.commit()
    lookups = []

    async def always_free(self, slug, *, exclude_id=None):
        lookups.append(slug)
        return False

    monkeypatch.setattr(PackageRepository, "slug_exists", always_free)

    with pytest.raises(ConflictError) as exc:
        await service.create_package({"title": "Uros Islands", "price": 60})
    assert exc.value.status_code == 409
    assert len(lookups) == SLUG_ATTEMPTS


async def test_other_integrity_errors_are_not_retried(session, service, monkeypatch):
    flushes = []

    async def failing_flush(*args, **kwargs):
        flushes.append(1)
        raise IntegrityError(
            "INSERT INTO packages", {}, Exception("NOT NULL constraint failed: packages.title")
        )

    monkeypatch.setattr(session, "flush", failing_flush)

    with pytest.raises(IntegrityError):
        await service.create_package({"title": "Colca Canyon", "price": 120})
    assert len(flushes) == 1


def test_slug_conflict_detection():
    sqlite = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: packages.slug"))
    postgres = IntegrityError(
        "INSERT", {}, Exception('duplicate key value violates unique constraint "packages_slug_key"')
    )
    other = IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed: packages.price"))

    assert is_slug_conflict(sqlite)
    assert is_slug_conflict(postgres)
    assert not is_slug_conflict(other)
