"""
Database Schema Definitions for Rentwise.

This module defines SQLite schemas for:
1. Core tables - profiles, properties, units, images, ratings,
   tenancies, tenancy participants and payments
2. Optional tables - agreements and maintenance requests

Optional tables may be missing from a deployment. Their presence is
detected once by rentwise.db.features and never inferred from query errors.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Optional

from rentwise.config import get_settings

logger = logging.getLogger(__name__)


# =============================================================================
# CORE SCHEMA
# =============================================================================

CORE_SCHEMA = """
CREATE TABLE IF NOT EXISTS profiles (
    id TEXT PRIMARY KEY,
    full_name TEXT NOT NULL DEFAULT '',
    email TEXT UNIQUE NOT NULL,
    role TEXT NOT NULL DEFAULT 'tenant' CHECK (role IN ('admin', 'landlord', 'tenant')),
    password_hash TEXT NOT NULL,
    created_at TIMESTAMP NOT NULL
);

CREATE TABLE IF NOT EXISTS properties (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    address TEXT NOT NULL,
    landlord_id TEXT NOT NULL REFERENCES profiles(id),
    created_at TIMESTAMP NOT NULL
);

CREATE TABLE IF NOT EXISTS units (
    id TEXT PRIMARY KEY,
    property_id TEXT NOT NULL REFERENCES properties(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    rent_amount REAL NOT NULL DEFAULT 0 CHECK (rent_amount >= 0),
    description TEXT,
    is_available INTEGER NOT NULL DEFAULT 1,
    created_at TIMESTAMP NOT NULL
);

CREATE TABLE IF NOT EXISTS images (
    id TEXT PRIMARY KEY,
    property_id TEXT NOT NULL REFERENCES properties(id) ON DELETE CASCADE,
    url TEXT NOT NULL,
    created_at TIMESTAMP NOT NULL
);

CREATE TABLE IF NOT EXISTS ratings (
    id TEXT PRIMARY KEY,
    property_id TEXT NOT NULL REFERENCES properties(id) ON DELETE CASCADE,
    rating INTEGER NOT NULL CHECK (rating BETWEEN 1 AND 5),
    comment TEXT,
    created_at TIMESTAMP NOT NULL
);

CREATE TABLE IF NOT EXISTS tenancies (
    id TEXT PRIMARY KEY,
    unit_id TEXT NOT NULL REFERENCES units(id) ON DELETE CASCADE,
    status TEXT NOT NULL DEFAULT 'pending' CHECK (status IN ('pending', 'active', 'ended')),
    start_date TEXT NOT NULL,
    end_date TEXT,
    created_at TIMESTAMP NOT NULL
);

CREATE TABLE IF NOT EXISTS tenancy_tenants (
    id TEXT PRIMARY KEY,
    tenancy_id TEXT NOT NULL REFERENCES tenancies(id) ON DELETE CASCADE,
    tenant_id TEXT NOT NULL REFERENCES profiles(id),
    created_at TIMESTAMP NOT NULL,
    UNIQUE(tenancy_id, tenant_id)
);

CREATE TABLE IF NOT EXISTS payments (
    id TEXT PRIMARY KEY,
    tenancy_id TEXT NOT NULL REFERENCES tenancies(id) ON DELETE CASCADE,
    amount REAL NOT NULL CHECK (amount >= 0),
    created_at TIMESTAMP NOT NULL,
    due_date TEXT,
    status TEXT CHECK (status IS NULL OR status IN ('paid', 'pending', 'overdue')),
    method TEXT
);

CREATE INDEX IF NOT EXISTS idx_properties_landlord ON properties(landlord_id);
CREATE INDEX IF NOT EXISTS idx_units_property ON units(property_id);
CREATE INDEX IF NOT EXISTS idx_tenancies_unit ON tenancies(unit_id);
CREATE INDEX IF NOT EXISTS idx_tenancy_tenants_tenant ON tenancy_tenants(tenant_id);
CREATE INDEX IF NOT EXISTS idx_payments_tenancy ON payments(tenancy_id);
"""


# =============================================================================
# OPTIONAL SCHEMA
# =============================================================================

OPTIONAL_SCHEMA = """
CREATE TABLE IF NOT EXISTS agreements (
    id TEXT PRIMARY KEY,
    tenancy_id TEXT REFERENCES tenancies(id) ON DELETE CASCADE,
    title TEXT,
    status TEXT,
    file_url TEXT,
    created_at TIMESTAMP
);

CREATE TABLE IF NOT EXISTS maintenance_requests (
    id TEXT PRIMARY KEY,
    tenant_id TEXT REFERENCES profiles(id),
    property_id TEXT REFERENCES properties(id) ON DELETE CASCADE,
    unit_id TEXT REFERENCES units(id) ON DELETE SET NULL,
    title TEXT,
    description TEXT,
    status TEXT DEFAULT 'open',
    created_at TIMESTAMP
);
"""


def init_database(db_path: Optional[Path] = None, include_optional: bool = False) -> Path:
    """Initialize the database with the core schema (and optionally the optional tables)."""
    db_path = Path(db_path or get_settings().database_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    try:
        conn.executescript(CORE_SCHEMA)
        if include_optional:
            conn.executescript(OPTIONAL_SCHEMA)
        conn.commit()
        logger.info(f"[DB] Initialized database: {db_path} (optional tables: {include_optional})")
    finally:
        conn.close()
    return db_path


def get_connection(db_path: Optional[Path] = None) -> sqlite3.Connection:
    """Open a connection with dict-like rows and foreign keys enforced."""
    db_path = Path(db_path or get_settings().database_path)
    if not db_path.exists():
        raise FileNotFoundError(f"Database not found: {db_path}. Run init_database() first.")

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON;")
    return conn


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_database()
