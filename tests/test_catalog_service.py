from datetime import timedelta

import pytest

from turismo.core import NotFoundError
from turismo.services import CatalogQueryService, PackageService
from turismo.services.catalog_service import (
    MAX_PAGE, parse_limit, parse_max_duration, parse_page, parse_promo, short_description,
)


@pytest.fixture
async def catalog(session, clock, now):
    """Five packages: two promos (one expired), one inactive"""
    writer = PackageService(session, strict=False)
    await writer.create_package({
        "title": "Uros Islands", "price": 50, "city": "Puno", "category": "Tour",
        "duration_hours": 4, "description": "Floating reed islands",
    })
    await writer.create_package({
        "title": "Machu Picchu Full Day", "price": 300, "city": "Cusco", "category": "Tour",
        "duration_hours": 16, "is_promo": True, "promo_percent": 10,
        "promo_start_at": now - timedelta(days=1), "promo_end_at": now + timedelta(days=5),
    })
    await writer.create_package({
        "title": "Lima Food Walk", "price": 80, "city": "Lima", "category": "Food",
        "duration_hours": 3, "is_promo": True, "promo_percent": 20,
        "promo_end_at": now - timedelta(days=2),
    })
    await writer.create_package({
        "title": "Colca Canyon", "price": 120, "city": "Arequipa", "category": "Trek",
        "duration_hours": 24,
    })
    hidden = await writer.create_package({"title": "Old Tour", "price": 10})
    await writer.deactivate_package(hidden.id)
    return CatalogQueryService(session, clock=clock, base_url="https://api.turismo.test")


def titles(result):
    return sorted(item["title"] for item in result["items"])


async def test_public_listing_hides_inactive(catalog):
    result = await catalog.list_packages()

    assert result["total"] == 4
    assert "Old Tour" not in titles(result)


async def test_public_callers_cannot_ask_for_inactive(catalog):
    result = await catalog.list_packages(active="false")

    assert "Old Tour" not in titles(result)


async def test_preview_can_filter_inactive(catalog):
    inactive = await catalog.list_packages(preview=True, active="false")
    everything = await catalog.list_packages(preview=True)

    assert titles(inactive) == ["Old Tour"]
    assert everything["total"] == 5


async def test_filters(catalog):
    assert titles(await catalog.list_packages(city="Cusco")) == ["Machu Picchu Full Day"]
    assert titles(await catalog.list_packages(category="Food")) == ["Lima Food Walk"]
    assert titles(await catalog.list_packages(q="REED")) == ["Uros Islands"]
    assert titles(await catalog.list_packages(min_price="60", max_price="150")) == [
        "Colca Canyon", "Lima Food Walk",
    ]
    assert titles(await catalog.list_packages(max_duration="4")) == ["Lima Food Walk", "Uros Islands"]


async def test_bad_numbers_are_ignored(catalog):
    result = await catalog.list_packages(min_price="cheap", max_duration="")

    assert result["total"] == 4


async def test_promo_filters(catalog):
    assert titles(await catalog.list_packages(promo="any")) == ["Lima Food Walk", "Machu Picchu Full Day"]
    assert titles(await catalog.list_packages(promo="active")) == ["Machu Picchu Full Day"]


async def test_sorting_by_price(catalog):
    asc = await catalog.list_packages(sort="price_asc")
    desc = await catalog.list_packages(sort="price_desc")

    assert [i["title"] for i in asc["items"]][0] == "Uros Islands"
    assert [i["title"] for i in desc["items"]][0] == "Machu Picchu Full Day"


async def test_pagination(catalog):
    result = await catalog.list_packages(sort="price_asc", page="2", limit="3")

    assert result["page"] == 2
    assert result["limit"] == 3
    assert result["pages"] == 2
    assert [i["title"] for i in result["items"]] == ["Machu Picchu Full Day"]


async def test_derived_pricing_in_listing(catalog):
    result = await catalog.list_packages(city="Cusco")
    item = result["items"][0]

    assert item["is_promo_active"] is True
    assert float(item["effective_price"]) == 270.0
    assert item["discount_percent"] == 10

    expired = (await catalog.list_packages(city="Lima"))["items"][0]
    assert expired["is_promo_active"] is False
    assert expired["effective_price"] is None


async def test_get_by_slug(catalog):
    detail = await catalog.get_by_slug("uros-islands")

    assert detail["title"] == "Uros Islands"
    with pytest.raises(NotFoundError):
        await catalog.get_by_slug("Not A Slug!")
    with pytest.raises(NotFoundError):
        await catalog.get_by_slug("missing")


async def test_inactive_slug_needs_preview(catalog):
    with pytest.raises(NotFoundError):
        await catalog.get_by_slug("old-tour")

    assert (await catalog.get_by_slug("old-tour", preview=True))["active"] is False


async def test_get_bookable_rejects_inactive(catalog):
    listing = await catalog.list_packages(preview=True, active="false")
    hidden_id = listing["items"][0]["id"]

    with pytest.raises(NotFoundError) as exc:
        await catalog.get_bookable(hidden_id)
    assert exc.value.message == "Package not found or inactive"


async def test_serialize_makes_media_absolute(session, now):
    package = await PackageService(session, strict=False).create_package({
        "title": "Media Tour", "price": 1,
        "media": [{"type": "video", "url": "/v.mp4"}, {"url": "uploads/a.jpg"}],
        "location": {"lat": -15.5, "lng": -70.1},
    })
    data = CatalogQueryService(session, base_url="https://api.turismo.test").serialize(package, now)

    assert data["main_image"] == "https://api.turismo.test/uploads/a.jpg"
    assert data["main_video"] == "https://api.turismo.test/v.mp4"
    assert data["has_location"] is True
    assert float(data["location"]["lat"]) == -15.5


def test_query_helpers():
    assert parse_limit("500") == 100
    assert parse_limit("0") == 20
    assert parse_limit("abc") == 20
    assert parse_promo("TRUE") == "active"
    assert parse_promo("whatever") is None
    assert short_description("a" * 300).endswith("…")
    assert len(short_description("a" * 300)) <= 200


async def test_page_far_past_the_end_is_empty(catalog):
    result = await catalog.list_packages(page="99999999999999999999")

    assert result["page"] == MAX_PAGE
    assert result["total"] == 4
    assert result["items"] == []


async def test_max_duration_is_clamped(catalog):
    assert (await catalog.list_packages(max_duration="99999999999999999999"))["total"] == 4
    assert (await catalog.list_packages(max_duration="-5"))["total"] == 0


def test_page_and_duration_bounds():
    assert parse_page("0") == 1
    assert parse_page(str(10 ** 30)) == MAX_PAGE
    assert parse_max_duration("1e30") == 240
    assert parse_max_duration("0") == 1
    assert parse_max_duration("6.5") == 6
    assert parse_max_duration("long") is None
