"""Optional tables: feature detection, agreements and maintenance requests."""
import pytest

from rentwise.db.features import detect_features, reset_feature_cache
from rentwise.db.schema import init_database

from tests.conftest import add_optional_tables


def test_detect_core_only(db_path):
    features = detect_features(db_path)
    assert features.agreements is False
    assert features.maintenance_requests is False


def test_detect_with_optional_tables(tmp_path):
    path = init_database(tmp_path / "full.db", include_optional=True)
    features = detect_features(path)
    assert features.agreements is True
    assert features.maintenance_requests is True


def test_detection_is_cached_until_reset(db_path):
    assert detect_features(db_path).agreements is False

    init_database(db_path, include_optional=True)
    assert detect_features(db_path).agreements is False

    reset_feature_cache()
    assert detect_features(db_path).agreements is True


def test_adding_tables_with_reset(db_path):
    assert detect_features(db_path).maintenance_requests is False
    add_optional_tables(db_path)
    assert detect_features(db_path).maintenance_requests is True


def test_missing_database_has_no_features(tmp_path):
    features = detect_features(tmp_path / "absent.db")
    assert features.model_dump() == {"agreements": False, "maintenance_requests": False}
    assert not (tmp_path / "absent.db").exists()


@pytest.mark.asyncio
async def test_features_endpoint(client, headers):
    resp = await client.get("/api/features", headers=headers["tenant_1"])
    assert resp.status_code == 200
    assert resp.json() == {"agreements": False, "maintenance_requests": False}


@pytest.mark.asyncio
async def test_agreements_empty_without_table(client, headers):
    resp = await client.get("/api/agreements", headers=headers["tenant_1"])
    assert resp.status_code == 200
    assert resp.json() == []


@pytest.mark.asyncio
async def test_agreements_scoped_to_visible_tenancies(client, headers, optional_tables):
    resp = await client.get("/api/agreements", headers=headers["tenant_1"])
    assert [a["id"] for a in resp.json()] == ["agr_1"]

    resp = await client.get("/api/agreements", headers=headers["tenant_2"])
    assert resp.json() == []

    resp = await client.get("/api/agreements", headers=headers["admin"])
    assert [a["id"] for a in resp.json()] == ["agr_1"]


@pytest.mark.asyncio
async def test_maintenance_empty_without_table(client, headers):
    resp = await client.get("/api/maintenance-requests", headers=headers["tenant_1"])
    assert resp.status_code == 200
    assert resp.json() == []


@pytest.mark.asyncio
async def test_maintenance_create_refused_without_table(client, headers):
    resp = await client.post("/api/maintenance-requests", json={"title": "Leak"}, headers=headers["tenant_1"])
    assert resp.status_code == 400
    assert resp.json()["description"] == "Maintenance requests are not available"


@pytest.mark.asyncio
async def test_maintenance_defaults_to_active_tenancy(client, headers, optional_tables):
    resp = await client.post(
        "/api/maintenance-requests",
        json={"title": "Leaking tap", "description": "Kitchen"},
        headers=headers["tenant_1"],
    )
    assert resp.status_code == 200
    request = resp.json()["request"]
    assert request["property_id"] == "prop_sunset"
    assert request["unit_id"] == "unit_a3"
    assert request["status"] == "open"

    # Owner sees it, other landlord does not
    resp = await client.get("/api/maintenance-requests", headers=headers["landlord_1"])
    assert [r["id"] for r in resp.json()] == [request["id"]]
    resp = await client.get("/api/maintenance-requests", headers=headers["landlord_2"])
    assert resp.json() == []

    resp = await client.get("/api/dashboard", headers=headers["tenant_1"])
    assert [r["id"] for r in resp.json()["maintenance_requests"]] == [request["id"]]


@pytest.mark.asyncio
async def test_maintenance_needs_a_property(client, headers, optional_tables):
    # tenant_2 has no active tenancy to default from
    resp = await client.post("/api/maintenance-requests", json={"title": "Noise"}, headers=headers["tenant_2"])
    assert resp.status_code == 400
