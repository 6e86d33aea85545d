"""
Property Service - Rentwise
Properties with their units, images and ratings. Browsing is open to every
signed-in user; mutations are limited to the owning landlord or an admin.
"""
import logging
import sqlite3
import uuid
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from rentwise.db.schema import get_connection
from rentwise.errors import NotFoundError, PermissionDeniedError, storage_errors
from rentwise.models import (
    Property,
    PropertyCreate,
    PropertyImage,
    PropertyUpdate,
    Rating,
    RatingCreate,
    RequestContext,
    Unit,
    UnitCreate,
    UnitUpdate,
)

logger = logging.getLogger(__name__)


def _to_unit(row: sqlite3.Row) -> Unit:
    return Unit(
        id=row["id"],
        property_id=row["property_id"],
        name=row["name"],
        rent_amount=row["rent_amount"] or 0,
        description=row["description"],
        is_available=bool(row["is_available"]),
    )


class PropertyService:
    """Properties, units, images and ratings."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _load(self, conn: sqlite3.Connection, where: str = "", params: tuple = ()) -> List[Property]:
        rows = conn.execute(
            f"""
            SELECT id, name, address, landlord_id, created_at
            FROM properties
            {where}
            ORDER BY created_at DESC
            """,
            params,
        ).fetchall()
        if not rows:
            return []

        ids = [row["id"] for row in rows]
        marks = ",".join("?" * len(ids))

        units: Dict[str, List[Unit]] = defaultdict(list)
        for row in conn.execute(
            f"""
            SELECT id, property_id, name, rent_amount, description, is_available
            FROM units WHERE property_id IN ({marks})
            ORDER BY created_at, rowid
            """,
            ids,
        ):
            units[row["property_id"]].append(_to_unit(row))

        images: Dict[str, List[PropertyImage]] = defaultdict(list)
        for row in conn.execute(
            f"SELECT id, property_id, url FROM images WHERE property_id IN ({marks}) ORDER BY created_at",
            ids,
        ):
            images[row["property_id"]].append(PropertyImage(id=row["id"], url=row["url"]))

        ratings: Dict[str, List[Rating]] = defaultdict(list)
        for row in conn.execute(
            f"SELECT property_id, rating, comment FROM ratings WHERE property_id IN ({marks}) ORDER BY created_at",
            ids,
        ):
            ratings[row["property_id"]].append(Rating(rating=row["rating"], comment=row["comment"]))

        return [
            Property(
                id=row["id"],
                name=row["name"],
                address=row["address"],
                landlord_id=row["landlord_id"],
                created_at=row["created_at"],
                units=units[row["id"]],
                images=images[row["id"]],
                ratings=ratings[row["id"]],
            )
            for row in rows
        ]

    def list_properties(self, landlord_id: Optional[str] = None) -> List[Property]:
        """All properties, or only those owned by `landlord_id`."""
        with storage_errors("Error fetching properties"):
            conn = get_connection(self.db_path)
            try:
                if landlord_id:
                    return self._load(conn, "WHERE landlord_id = ?", (landlord_id,))
                return self._load(conn)
            finally:
                conn.close()

    def get_property(self, property_id: str) -> Property:
        with storage_errors("Error fetching property"):
            conn = get_connection(self.db_path)
            try:
                found = self._load(conn, "WHERE id = ?", (property_id,))
            finally:
                conn.close()
        if not found:
            raise NotFoundError("Property not found", f"No property with id {property_id}")
        return found[0]

    def get_unit(self, unit_id: str) -> Unit:
        with storage_errors("Error fetching unit"):
            conn = get_connection(self.db_path)
            try:
                row = conn.execute(
                    "SELECT id, property_id, name, rent_amount, description, is_available FROM units WHERE id = ?",
                    (unit_id,),
                ).fetchone()
            finally:
                conn.close()
        if not row:
            raise NotFoundError("Unit not found", f"No unit with id {unit_id}")
        return _to_unit(row)

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------

    @staticmethod
    def can_manage(ctx: RequestContext, prop: Property) -> bool:
        return ctx.is_admin or ctx.user_id == prop.landlord_id

    def managed_property(self, ctx: RequestContext, property_id: str, title: str) -> Property:
        prop = self.get_property(property_id)
        if not self.can_manage(ctx, prop):
            raise PermissionDeniedError(title, "Only the property owner or an admin can do this")
        return prop

    # ------------------------------------------------------------------
    # Property mutations
    # ------------------------------------------------------------------

    def create_property(self, ctx: RequestContext, body: PropertyCreate) -> Property:
        property_id = str(uuid.uuid4())
        with storage_errors("Error creating property"):
            conn = get_connection(self.db_path)
            try:
                conn.execute(
                    "INSERT INTO properties (id, name, address, landlord_id, created_at) VALUES (?, ?, ?, ?, ?)",
                    (property_id, body.name, body.address, ctx.user_id, datetime.now().isoformat()),
                )
                conn.commit()
            finally:
                conn.close()
        logger.info(f"[PROPERTIES] {ctx.user_id} created property {property_id}")
        return self.get_property(property_id)

    def update_property(self, ctx: RequestContext, property_id: str, updates: PropertyUpdate) -> Property:
        self.managed_property(ctx, property_id, "Error updating property")
        fields = updates.model_dump(exclude_unset=True, exclude_none=True)
        if fields:
            assignments = ", ".join(f"{col} = ?" for col in fields)
            with storage_errors("Error updating property"):
                conn = get_connection(self.db_path)
                try:
                    conn.execute(f"UPDATE properties SET {assignments} WHERE id = ?", (*fields.values(), property_id))
                    conn.commit()
                finally:
                    conn.close()
            logger.info(f"[PROPERTIES] Updated {sorted(fields)} on {property_id}")
        return self.get_property(property_id)

    def delete_property(self, ctx: RequestContext, property_id: str) -> None:
        self.managed_property(ctx, property_id, "Error deleting property")
        with storage_errors("Error deleting property"):
            conn = get_connection(self.db_path)
            try:
                conn.execute("DELETE FROM properties WHERE id = ?", (property_id,))
                conn.commit()
            finally:
                conn.close()
        logger.info(f"[PROPERTIES] {ctx.user_id} deleted property {property_id}")

    def add_image(self, ctx: RequestContext, property_id: str, url: str) -> PropertyImage:
        self.managed_property(ctx, property_id, "Error uploading image")
        image = PropertyImage(id=str(uuid.uuid4()), url=url)
        with storage_errors("Error uploading image"):
            conn = get_connection(self.db_path)
            try:
                conn.execute(
                    "INSERT INTO images (id, property_id, url, created_at) VALUES (?, ?, ?, ?)",
                    (image.id, property_id, url, datetime.now().isoformat()),
                )
                conn.commit()
            finally:
                conn.close()
        return image

    def add_rating(self, ctx: RequestContext, property_id: str, body: RatingCreate) -> Rating:
        self.get_property(property_id)
        with storage_errors("Error saving rating"):
            conn = get_connection(self.db_path)
            try:
                conn.execute(
                    "INSERT INTO ratings (id, property_id, rating, comment, created_at) VALUES (?, ?, ?, ?, ?)",
                    (str(uuid.uuid4()), property_id, body.rating, body.comment, datetime.now().isoformat()),
                )
                conn.commit()
            finally:
                conn.close()
        return Rating(rating=body.rating, comment=body.comment)

    # ------------------------------------------------------------------
    # Unit mutations
    # ------------------------------------------------------------------

    def create_unit(self, ctx: RequestContext, property_id: str, body: UnitCreate) -> Unit:
        self.managed_property(ctx, property_id, "Error saving unit")
        unit_id = str(uuid.uuid4())
        with storage_errors("Error saving unit"):
            conn = get_connection(self.db_path)
            try:
                conn.execute(
                    """
                    INSERT INTO units (id, property_id, name, rent_amount, description, is_available, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (unit_id, property_id, body.name, body.rent_amount, body.description,
                     int(body.is_available), datetime.now().isoformat()),
                )
                conn.commit()
            finally:
                conn.close()
        logger.info(f"[PROPERTIES] Added unit {unit_id} to {property_id}")
        return self.get_unit(unit_id)

    def update_unit(self, ctx: RequestContext, unit_id: str, updates: UnitUpdate) -> Unit:
        unit = self.get_unit(unit_id)
        self.managed_property(ctx, unit.property_id, "Error saving unit")
        fields = updates.model_dump(exclude_unset=True, exclude_none=True)
        if "is_available" in fields:
            fields["is_available"] = int(fields["is_available"])
        if fields:
            assignments = ", ".join(f"{col} = ?" for col in fields)
            with storage_errors("Error saving unit"):
                conn = get_connection(self.db_path)
                try:
                    conn.execute(f"UPDATE units SET {assignments} WHERE id = ?", (*fields.values(), unit_id))
                    conn.commit()
                finally:
                    conn.close()
        return self.get_unit(unit_id)

    def delete_unit(self, ctx: RequestContext, unit_id: str) -> None:
        unit = self.get_unit(unit_id)
        self.managed_property(ctx, unit.property_id, "Error deleting unit")
        with storage_errors("Error deleting unit"):
            conn = get_connection(self.db_path)
            try:
                conn.execute("DELETE FROM units WHERE id = ?", (unit_id,))
                conn.commit()
            finally:
                conn.close()
        logger.info(f"[PROPERTIES] Deleted unit {unit_id}")
