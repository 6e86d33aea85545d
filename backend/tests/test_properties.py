"""Property API: browsing, search, management and image storage."""
from pathlib import Path

import pytest

from rentwise.config import get_settings


@pytest.mark.asyncio
async def test_requires_auth(client, headers):
    resp = await client.get("/api/properties")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_list_properties(client, headers):
    resp = await client.get("/api/properties", headers=headers["tenant_1"])
    assert resp.status_code == 200
    cards = {p["id"]: p for p in resp.json()}
    assert set(cards) == {"prop_sunset", "prop_empty", "prop_hill"}

    sunset = cards["prop_sunset"]
    assert sunset["total_units"] == 3
    assert sunset["available_units"] == 2
    assert (sunset["min_rent"], sunset["max_rent"]) == (500, 900)
    assert sunset["average_rating"] == 3
    assert sunset["can_manage"] is False


@pytest.mark.asyncio
async def test_list_mine(client, headers):
    resp = await client.get("/api/properties?mine=true", headers=headers["landlord_1"])
    cards = resp.json()
    assert {p["id"] for p in cards} == {"prop_sunset", "prop_empty"}
    assert all(p["can_manage"] for p in cards)


@pytest.mark.asyncio
async def test_search_rent_window(client, headers):
    resp = await client.get("/api/properties/search?min_rent=600&max_rent=1000", headers=headers["tenant_1"])
    assert resp.status_code == 200
    assert [p["name"] for p in resp.json()] == ["Sunset Apartments"]

    resp = await client.get("/api/properties/search?min_rent=1000&max_rent=2000", headers=headers["tenant_1"])
    assert [p["name"] for p in resp.json()] == ["Hillview Flats"]


@pytest.mark.asyncio
async def test_search_defaults_skip_fully_let(client, headers):
    resp = await client.get("/api/properties/search", headers=headers["tenant_1"])
    # Empty Court has no available units
    assert [p["name"] for p in resp.json()] == ["Hillview Flats", "Sunset Apartments"]


@pytest.mark.asyncio
async def test_search_text_and_sort(client, headers):
    resp = await client.get("/api/properties/search?q=ROAD", headers=headers["tenant_1"])
    assert [p["id"] for p in resp.json()] == ["prop_sunset"]

    resp = await client.get("/api/properties/search?sort=rent_desc", headers=headers["tenant_1"])
    assert [p["id"] for p in resp.json()] == ["prop_hill", "prop_sunset"]


@pytest.mark.asyncio
async def test_get_missing_property(client, headers):
    resp = await client.get("/api/properties/nope", headers=headers["tenant_1"])
    assert resp.status_code == 404
    assert resp.json()["title"] == "Property not found"


@pytest.mark.asyncio
async def test_landlord_creates_property_and_unit(client, headers):
    resp = await client.post(
        "/api/properties", json={"name": "Lakeside", "address": "5 Lake Drive"}, headers=headers["landlord_2"]
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["property"]["landlord_id"] == "landlord_2"
    assert data["notification"]["title"] == "Property created successfully"
    property_id = data["property"]["id"]

    resp = await client.post(
        f"/api/properties/{property_id}/units",
        json={"name": "L1", "rent_amount": 650},
        headers=headers["landlord_2"],
    )
    assert resp.status_code == 200
    assert resp.json()["unit"]["is_available"] is True

    resp = await client.get("/api/properties/search?q=lakeside", headers=headers["tenant_1"])
    assert [p["id"] for p in resp.json()] == [property_id]


@pytest.mark.asyncio
async def test_tenant_cannot_create_property(client, headers):
    resp = await client.post(
        "/api/properties", json={"name": "Mine", "address": "Somewhere"}, headers=headers["tenant_1"]
    )
    assert resp.status_code == 403
    assert resp.json() == {
        "title": "Permission denied",
        "description": "Insufficient role",
        "variant": "destructive",
    }


@pytest.mark.asyncio
async def test_only_owner_updates(client, headers):
    resp = await client.patch("/api/properties/prop_sunset", json={"name": "Nope"}, headers=headers["landlord_2"])
    assert resp.status_code == 403

    resp = await client.patch(
        "/api/properties/prop_sunset", json={"name": "Sunrise Apartments"}, headers=headers["landlord_1"]
    )
    assert resp.status_code == 200
    assert resp.json()["property"]["name"] == "Sunrise Apartments"

    resp = await client.patch("/api/properties/prop_sunset", json={"name": "By Admin"}, headers=headers["admin"])
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_update_and_delete_unit(client, headers):
    resp = await client.patch(
        "/api/units/unit_a2", json={"rent_amount": 950, "is_available": False}, headers=headers["landlord_1"]
    )
    assert resp.status_code == 200
    unit = resp.json()["unit"]
    assert unit["rent_amount"] == 950
    assert unit["is_available"] is False

    resp = await client.delete("/api/units/unit_a2", headers=headers["tenant_1"])
    assert resp.status_code == 403

    resp = await client.delete("/api/units/unit_a2", headers=headers["landlord_1"])
    assert resp.status_code == 200
    assert resp.json()["deleted"] is True

    resp = await client.get("/api/properties/prop_sunset", headers=headers["landlord_1"])
    assert "unit_a2" not in {u["id"] for u in resp.json()["units"]}


@pytest.mark.asyncio
async def test_negative_rent_rejected(client, headers):
    resp = await client.post(
        "/api/properties/prop_sunset/units", json={"name": "Bad", "rent_amount": -1}, headers=headers["landlord_1"]
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_rating(client, headers):
    resp = await client.post(
        "/api/properties/prop_sunset/ratings", json={"rating": 5, "comment": "Lovely"}, headers=headers["tenant_1"]
    )
    assert resp.status_code == 200

    resp = await client.get("/api/properties/prop_sunset", headers=headers["tenant_1"])
    assert resp.json()["average_rating"] == 4

    resp = await client.post("/api/properties/prop_sunset/ratings", json={"rating": 6}, headers=headers["tenant_1"])
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_image_upload_and_delete(client, headers):
    files = {"file": ("front.png", b"\x89PNG fake image bytes", "image/png")}
    resp = await client.post("/api/properties/prop_sunset/images", files=files, headers=headers["landlord_1"])
    assert resp.status_code == 200
    url = resp.json()["image"]["url"]
    assert url.startswith("/media/property-images/landlord_1/prop_sunset/")
    assert url.endswith(".png")

    stored = Path(get_settings().storage_dir) / url[len("/media/"):]
    assert stored.read_bytes() == b"\x89PNG fake image bytes"

    resp = await client.get("/api/properties/prop_sunset", headers=headers["tenant_1"])
    assert [i["url"] for i in resp.json()["images"]] == [url]

    resp = await client.delete("/api/properties/prop_sunset", headers=headers["landlord_1"])
    assert resp.status_code == 200
    assert not stored.exists()

    resp = await client.get("/api/properties/prop_sunset", headers=headers["landlord_1"])
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_image_upload_forbidden_for_non_owner(client, headers):
    files = {"file": ("front.png", b"data", "image/png")}
    resp = await client.post("/api/properties/prop_sunset/images", files=files, headers=headers["tenant_1"])
    assert resp.status_code == 403
    assert not (Path(get_settings().storage_dir) / "property-images").exists()


@pytest.mark.asyncio
async def test_image_upload_rejects_unknown_type(client, headers):
    files = {"file": ("notes.txt", b"hello", "text/plain")}
    resp = await client.post("/api/properties/prop_sunset/images", files=files, headers=headers["landlord_1"])
    assert resp.status_code == 400
