"""
Test fixtures for Rentwise backend tests.

Every test gets its own temporary SQLite database and storage directory,
seeded with a small platform: two landlords, two tenants, an admin,
three properties and three tenancies.

    Sunset Apartments (landlord_1)  A1 500 avail, A2 900 avail, A3 1500 let
    Empty Court       (landlord_1)  C1 700 not available
    Hillview Flats    (landlord_2)  H1 1200 avail

    tn_active  A3 active   tenant_1   payments 100 (due in 3 days) + 200
    tn_pending A1 pending  tenant_2
    tn_ended   H1 ended    tenant_2   payment 50
"""
from datetime import date, datetime, timedelta
from pathlib import Path

import pytest
from httpx import AsyncClient, ASGITransport

from rentwise.config import get_settings
from rentwise.db.features import reset_feature_cache
from rentwise.db.schema import OPTIONAL_SCHEMA, get_connection, init_database
from rentwise.main import app
from rentwise.models import Profile, RequestContext, Role
from rentwise.services.auth_service import create_token, hash_password


# ── Seed data ──────────────────────────────────────────────────────────

TEST_PASSWORD = "secret123"
TEST_JWT_SECRET = "rentwise-test-secret-0123456789abcdef0123456789"
_PASSWORD_HASH = hash_password(TEST_PASSWORD)

PROFILES = {
    "admin": Profile(id="admin", full_name="Ada Admin", email="admin@rentwise.test", role=Role.ADMIN),
    "landlord_1": Profile(id="landlord_1", full_name="Lena Landlord", email="lena@rentwise.test", role=Role.LANDLORD),
    "landlord_2": Profile(id="landlord_2", full_name="Leo Landlord", email="leo@rentwise.test", role=Role.LANDLORD),
    "tenant_1": Profile(id="tenant_1", full_name="Tom Tenant", email="tom@rentwise.test", role=Role.TENANT),
    "tenant_2": Profile(id="tenant_2", full_name="Tia Tenant", email="tia@rentwise.test", role=Role.TENANT),
}

CREATED = "2026-01-01T09:00:00"


def _seed(db_path: Path):
    today = date.today()
    now = datetime.now()

    conn = get_connection(db_path)
    try:
        for p in PROFILES.values():
            conn.execute(
                "INSERT INTO profiles (id, full_name, email, role, password_hash, created_at) VALUES (?, ?, ?, ?, ?, ?)",
                (p.id, p.full_name, p.email, p.role.value, _PASSWORD_HASH, CREATED),
            )

        conn.executemany(
            "INSERT INTO properties (id, name, address, landlord_id, created_at) VALUES (?, ?, ?, ?, ?)",
            [
                ("prop_sunset", "Sunset Apartments", "12 Kampala Road", "landlord_1", CREATED),
                ("prop_empty", "Empty Court", "3 Jinja Lane", "landlord_1", CREATED),
                ("prop_hill", "Hillview Flats", "88 Entebbe Avenue", "landlord_2", CREATED),
            ],
        )
        conn.executemany(
            """
            INSERT INTO units (id, property_id, name, rent_amount, description, is_available, created_at)
            VALUES (?, ?, ?, ?, NULL, ?, ?)
            """,
            [
                ("unit_a1", "prop_sunset", "A1", 500, 1, CREATED),
                ("unit_a2", "prop_sunset", "A2", 900, 1, CREATED),
                ("unit_a3", "prop_sunset", "A3", 1500, 0, CREATED),
                ("unit_c1", "prop_empty", "C1", 700, 0, CREATED),
                ("unit_h1", "prop_hill", "H1", 1200, 1, CREATED),
            ],
        )
        conn.executemany(
            "INSERT INTO ratings (id, property_id, rating, comment, created_at) VALUES (?, ?, ?, ?, ?)",
            [
                ("rating_1", "prop_sunset", 3, None, CREATED),
                ("rating_2", "prop_hill", 5, "Great views", CREATED),
            ],
        )

        conn.executemany(
            "INSERT INTO tenancies (id, unit_id, status, start_date, end_date, created_at) VALUES (?, ?, ?, ?, ?, ?)",
            [
                ("tn_ended", "unit_h1", "ended", "2025-01-01", "2025-12-31", "2025-01-01T09:00:00"),
                ("tn_active", "unit_a3", "active", "2026-01-01", None, "2026-01-01T09:00:00"),
                ("tn_pending", "unit_a1", "pending", "2026-02-01", None, "2026-02-01T09:00:00"),
            ],
        )
        conn.executemany(
            "INSERT INTO tenancy_tenants (id, tenancy_id, tenant_id, created_at) VALUES (?, ?, ?, ?)",
            [
                ("tt_1", "tn_active", "tenant_1", CREATED),
                ("tt_2", "tn_pending", "tenant_2", CREATED),
                ("tt_3", "tn_ended", "tenant_2", CREATED),
            ],
        )

        long_ago = (now - timedelta(days=60)).isoformat()
        conn.executemany(
            """
            INSERT INTO payments (id, tenancy_id, amount, created_at, due_date, status, method)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            [
                ("pay_recent", "tn_active", 100, now.isoformat(), (today + timedelta(days=3)).isoformat(), "pending", None),
                ("pay_old", "tn_active", 200, long_ago, None, "paid", "mtn-momo"),
                ("pay_ended", "tn_ended", 50, long_ago, None, "paid", "bank"),
            ],
        )
        conn.commit()
    finally:
        conn.close()


def add_optional_tables(db_path: Path):
    """Create the optional tables with one agreement on tn_active."""
    conn = get_connection(db_path)
    try:
        conn.executescript(OPTIONAL_SCHEMA)
        conn.execute(
            "INSERT INTO agreements (id, tenancy_id, title, status, file_url, created_at) VALUES (?, ?, ?, ?, ?, ?)",
            ("agr_1", "tn_active", "Lease A3", "signed", None, CREATED),
        )
        conn.commit()
    finally:
        conn.close()
    reset_feature_cache()


def context(key: str) -> RequestContext:
    profile = PROFILES[key]
    return RequestContext(user_id=profile.id, profile=profile)


# ── Fixtures ───────────────────────────────────────────────────────────

@pytest.fixture
def db_path(tmp_path, monkeypatch):
    """Fresh seeded database; settings point at it for the test's duration."""
    path = tmp_path / "rentwise.db"
    monkeypatch.setenv("RENTWISE_DATABASE_PATH", str(path))
    monkeypatch.setenv("RENTWISE_STORAGE_DIR", str(tmp_path / "storage"))
    monkeypatch.setenv("RENTWISE_JWT_SECRET", TEST_JWT_SECRET)
    get_settings.cache_clear()
    reset_feature_cache()

    init_database(path)
    _seed(path)
    yield path

    get_settings.cache_clear()
    reset_feature_cache()


@pytest.fixture
def optional_tables(db_path):
    add_optional_tables(db_path)
    return db_path


@pytest.fixture
def headers(db_path):
    """Authorization headers per seeded profile key."""
    return {
        key: {"Authorization": f"Bearer {create_token(profile)}"}
        for key, profile in PROFILES.items()
    }


@pytest.fixture
async def client(db_path):
    """Async test client for the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
