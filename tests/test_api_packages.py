import pytest

from turismo.infrastructure.repositories import PackageRepository

API = "/api/v1/packages"


@pytest.fixture
async def city_tour(client, agent_headers) -> dict:
    """City Tour at 100 USD with a 10% promotion"""
    response = await client.post(API, headers=agent_headers, json={
        "title": "City Tour",
        "price": 100,
        "currency": "USD",
        "city": "Lima",
        "isPromo": True,
        "promoPercent": 10,
        "media": [{"type": "image", "url": "/uploads/city.jpg"}],
        "location": {"lat": -12.04, "lng": -77.03},
    })
    assert response.status_code == 201
    return response.json()


async def test_create_returns_derived_pricing(city_tour):
    assert city_tour["slug"] == "city-tour"
    assert city_tour["isPromoActive"] is True
    assert city_tour["effectivePrice"] == 90.0
    assert city_tour["discountPercent"] == 10
    assert city_tour["mainImage"] == "https://api.turismo.test/uploads/city.jpg"
    assert city_tour["location"] == {"lat": -12.04, "lng": -77.03}
    assert city_tour["hasLocation"] is True


async def test_promotion_end_to_end_booking_uses_base_price(client, city_tour, notifier):
    response = await client.post("/api/v1/bookings", json={
        "packageId": city_tour["id"],
        "date": "2026-03-15",
        "people": {"adults": 1},
        "customer": {"name": "Luis Mamani", "email": "luis@mail.pe"},
    })

    assert response.status_code == 201
    body = response.json()
    assert body["totalPrice"] == 100.0
    assert body["currency"] == "USD"
    assert len(notifier.notices) == 1


async def test_public_list_and_detail(client, city_tour):
    listing = await client.get(API, params={"city": "Lima", "limit": "5"})
    assert listing.status_code == 200
    body = listing.json()
    assert body["total"] == 1
    assert body["limit"] == 5
    assert body["items"][0]["id"] == city_tour["id"]

    detail = await client.get(f"{API}/city-tour")
    assert detail.status_code == 200
    assert detail.json()["title"] == "City Tour"


async def test_unknown_slug_is_404(client):
    response = await client.get(f"{API}/nothing-here")

    assert response.status_code == 404
    assert response.json()["error"] == "Package not found"


async def test_same_title_twice_gets_new_slug(client, agent_headers, city_tour):
    response = await client.post(API, headers=agent_headers, json={"title": "City Tour", "price": 90})

    assert response.json()["slug"] == "city-tour-2"


async def test_writes_require_a_token(client):
    response = await client.post(API, json={"title": "City Tour", "price": 100})

    assert response.status_code == 401
    assert response.json()["error"] == "Missing credentials"


async def test_invalid_payload_is_400(client, agent_headers):
    response = await client.post(API, headers=agent_headers, json={"price": -1})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation error"
    fields = {e["field"] for e in body["details"]["errors"]}
    assert {"title", "price"} <= fields


async def test_update_and_deactivate(client, agent_headers, city_tour):
    pid = city_tour["id"]

    updated = await client.put(f"{API}/{pid}", headers=agent_headers, json={"price": 120, "isPromo": False})
    assert updated.status_code == 200
    assert updated.json()["price"] == 120.0
    assert updated.json()["effectivePrice"] is None
    assert updated.json()["slug"] == "city-tour"

    deactivated = await client.post(f"{API}/{pid}/deactivate", headers=agent_headers)
    assert deactivated.json()["active"] is False

    assert (await client.get(f"{API}/city-tour")).status_code == 404
    assert (await client.get(f"{API}/city-tour", params={"preview": "1"})).status_code == 404
    preview = await client.get(f"{API}/city-tour", params={"preview": "1"}, headers=agent_headers)
    assert preview.status_code == 200

    by_id = await client.get(f"{API}/id/{pid}", headers=agent_headers)
    assert by_id.json()["active"] is False


async def test_only_admin_deletes(client, agent_headers, admin_headers, city_tour):
    pid = city_tour["id"]

    forbidden = await client.delete(f"{API}/{pid}", headers=agent_headers)
    assert forbidden.status_code == 403

    deleted = await client.delete(f"{API}/{pid}", headers=admin_headers)
    assert deleted.status_code == 200
    assert deleted.json() == {"ok": True, "id": pid}

    missing = await client.delete(f"{API}/{pid}", headers=admin_headers)
    assert missing.status_code == 404


async def test_admin_passes_agent_checks(client, admin_headers):
    response = await client.post(API, headers=admin_headers, json={"title": "Admin Tour", "price": 1})

    assert response.status_code == 201


async def test_huge_page_and_duration_return_empty_page(client, city_tour):
    response = await client.get(API, params={"page": "99999999999999999999", "maxDur": "1e40"})

    assert response.status_code == 200
    assert response.json()["items"] == []
    assert response.json()["total"] == 1


async def test_exhausted_slug_retries_are_409(client, agent_headers, city_tour, monkeypatch):
    async def always_free(self, slug, *, exclude_id=None):
        return False

    monkeypatch.setattr(PackageRepository, "slug_exists", always_free)

    response = await client.post(API, headers=agent_headers, json={"title": "City Tour", "price": 90})

    assert response.status_code == 409
    assert response.json() == {"error": "Could not assign a unique slug, try again", "details": {}}
