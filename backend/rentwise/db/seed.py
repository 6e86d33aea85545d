#!/usr/bin/env python3
"""
Rentwise - Database bootstrap
=============================
Creates the schema and the first admin account. Admins cannot sign
themselves up through the API, so this is how a deployment gets one.

Usage:
    python -m rentwise.db.seed                              # Core tables only
    python -m rentwise.db.seed --optional                   # Also agreements + maintenance requests
    python -m rentwise.db.seed --admin-email admin@example.com --admin-password secret123
    python -m rentwise.db.seed --db /tmp/rentwise.db
"""
import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from rentwise.db.features import reset_feature_cache
from rentwise.db.schema import init_database
from rentwise.errors import ConflictError
from rentwise.models import Role
from rentwise.services.auth_service import hash_password
from rentwise.services.profile_service import ProfileService

logger = logging.getLogger(__name__)


def seed(db_path: Path = None, include_optional: bool = False, admin_email: str = None,
         admin_password: str = None, admin_name: str = "Administrator") -> Path:
    """Initialise the database and create the admin profile if requested."""
    db_path = init_database(db_path, include_optional=include_optional)
    reset_feature_cache()

    if admin_email:
        if not admin_password:
            raise ValueError("--admin-password is required with --admin-email")
        try:
            profile = ProfileService(db_path).create_profile(
                admin_email, hash_password(admin_password), admin_name, Role.ADMIN
            )
            logger.info(f"[SEED] Created admin {profile.email} ({profile.id})")
        except ConflictError:
            logger.info(f"[SEED] Admin {admin_email} already exists, skipping")
    return db_path


def main():
    load_dotenv()
    parser = argparse.ArgumentParser(description="Initialise the Rentwise database")
    parser.add_argument("--db", type=Path, default=None, help="Database path (default: RENTWISE_DATABASE_PATH)")
    parser.add_argument("--optional", action="store_true", help="Also create the optional tables")
    parser.add_argument("--admin-email", default=None, help="Create an admin profile with this email")
    parser.add_argument("--admin-password", default=None)
    parser.add_argument("--admin-name", default="Administrator")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    try:
        db_path = seed(args.db, args.optional, args.admin_email, args.admin_password, args.admin_name)
    except ValueError as e:
        parser.error(str(e))
    print(f"Database ready: {db_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
