"""
Profile Service - Rentwise
Reads and updates user profiles. The profile's role decides which
dashboard a user gets and which mutations they may perform.
"""
import logging
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

from rentwise.db.schema import get_connection
from rentwise.errors import ConflictError, NotFoundError, storage_errors
from rentwise.models import Profile, ProfileUpdate, RequestContext, Role

logger = logging.getLogger(__name__)

_PROFILE_COLUMNS = "id, full_name, email, role, created_at"


def _to_profile(row: sqlite3.Row) -> Profile:
    return Profile(
        id=row["id"],
        full_name=row["full_name"] or "",
        email=row["email"],
        role=Role(row["role"]),
        created_at=row["created_at"],
    )


class ProfileService:
    """Profiles table access."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path

    def get_profile(self, profile_id: str) -> Optional[Profile]:
        with storage_errors("Error fetching profile"):
            conn = get_connection(self.db_path)
            try:
                row = conn.execute(
                    f"SELECT {_PROFILE_COLUMNS} FROM profiles WHERE id = ?", (profile_id,)
                ).fetchone()
            finally:
                conn.close()
        return _to_profile(row) if row else None

    def get_credentials(self, email: str) -> Optional[Tuple[Profile, str]]:
        """Profile plus stored password hash, for sign-in."""
        with storage_errors("Error fetching profile"):
            conn = get_connection(self.db_path)
            try:
                row = conn.execute(
                    f"SELECT {_PROFILE_COLUMNS}, password_hash FROM profiles WHERE lower(email) = lower(?)",
                    (email,),
                ).fetchone()
            finally:
                conn.close()
        if not row:
            return None
        return _to_profile(row), row["password_hash"]

    def create_profile(self, email: str, password_hash: str, full_name: str = "", role: Role = Role.TENANT) -> Profile:
        profile_id = str(uuid.uuid4())
        with storage_errors("Error creating profile"):
            conn = get_connection(self.db_path)
            try:
                exists = conn.execute(
                    "SELECT 1 FROM profiles WHERE lower(email) = lower(?)", (email,)
                ).fetchone()
                if exists:
                    raise ConflictError("Error creating profile", "Email already registered")
                conn.execute(
                    """
                    INSERT INTO profiles (id, full_name, email, role, password_hash, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (profile_id, full_name, email, role.value, password_hash, datetime.now().isoformat()),
                )
                conn.commit()
            finally:
                conn.close()
        logger.info(f"[PROFILES] Created {role.value} profile {profile_id}")
        return self.get_profile(profile_id)

    def update_profile(self, ctx: RequestContext, updates: ProfileUpdate) -> Profile:
        """Update the caller's own name and email."""
        fields = updates.model_dump(exclude_unset=True, exclude_none=True)
        if fields:
            assignments = ", ".join(f"{col} = ?" for col in fields)
            with storage_errors("Error updating profile"):
                conn = get_connection(self.db_path)
                try:
                    if "email" in fields and conn.execute(
                        "SELECT 1 FROM profiles WHERE lower(email) = lower(?) AND id != ?",
                        (fields["email"], ctx.user_id),
                    ).fetchone():
                        raise ConflictError("Error updating profile", "Email already registered")
                    conn.execute(
                        f"UPDATE profiles SET {assignments} WHERE id = ?",
                        (*fields.values(), ctx.user_id),
                    )
                    conn.commit()
                except sqlite3.IntegrityError as e:
                    raise ConflictError("Error updating profile", "Email already registered") from e
                finally:
                    conn.close()
            logger.info(f"[PROFILES] Updated {sorted(fields)} for {ctx.user_id}")

        profile = self.get_profile(ctx.user_id)
        if profile is None:
            raise NotFoundError("Error updating profile", "Profile not found")
        return profile
