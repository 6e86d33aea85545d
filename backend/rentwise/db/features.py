"""
Feature availability for optional tables.

Agreements and maintenance requests live in tables that a deployment may
not have created. Availability is resolved once per database file and
cached; callers check the flags instead of sniffing query errors.
"""
import logging
import sqlite3
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from rentwise.config import get_settings

logger = logging.getLogger(__name__)

OPTIONAL_TABLES = ("agreements", "maintenance_requests")


class FeatureAvailability(BaseModel):
    agreements: bool = False
    maintenance_requests: bool = False


@lru_cache()
def _detect(db_path: str) -> FeatureAvailability:
    if not Path(db_path).exists():
        logger.warning(f"[FEATURES] No database at {db_path}")
        return FeatureAvailability()
    try:
        conn = sqlite3.connect(db_path)
        try:
            rows = conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' AND name IN (?, ?)",
                OPTIONAL_TABLES,
            ).fetchall()
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.warning(f"[FEATURES] Could not inspect {db_path}: {e}")
        return FeatureAvailability()

    present = {row[0] for row in rows}
    features = FeatureAvailability(
        agreements="agreements" in present,
        maintenance_requests="maintenance_requests" in present,
    )
    logger.info(f"[FEATURES] {db_path}: {features.model_dump()}")
    return features


def detect_features(db_path: Optional[Path] = None) -> FeatureAvailability:
    """Return the (cached) optional-table availability for a database."""
    return _detect(str(db_path or get_settings().database_path))


def reset_feature_cache() -> None:
    """Forget detected features, e.g. after tables were created at runtime."""
    _detect.cache_clear()
