"""
Tenancy Service - Rentwise
Tenancies with their unit, tenant participants and payments.

Lifecycle: a tenant applies (pending); the owning landlord or an admin
approves (active) or rejects (ended). The unit's availability follows the
tenancy in and out of the active state.

Visibility:
- admin: every tenancy
- landlord: tenancies on units of their own properties, plus any they are a participant of
- tenant: tenancies they are a participant of
"""
import logging
import sqlite3
import uuid
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from rentwise.db.schema import get_connection
from rentwise.errors import ConflictError, NotFoundError, PermissionDeniedError, storage_errors
from rentwise.models import (
    Payment,
    PropertySummary,
    RequestContext,
    Role,
    Tenancy,
    TenancyCreate,
    TenancyStatus,
    TenancyTenant,
    TenancyUnit,
    TenantInfo,
)

logger = logging.getLogger(__name__)

_TENANCY_SELECT = """
    SELECT t.id, t.unit_id, t.status, t.start_date, t.end_date, t.created_at,
           u.name AS unit_name, u.rent_amount,
           p.id AS property_id, p.name AS property_name, p.address, p.landlord_id
    FROM tenancies t
    JOIN units u ON u.id = t.unit_id
    JOIN properties p ON p.id = u.property_id
"""

_PARTICIPANT = "t.id IN (SELECT tenancy_id FROM tenancy_tenants WHERE tenant_id = ?)"


def _to_payment(row: sqlite3.Row) -> Payment:
    return Payment(
        id=row["id"],
        tenancy_id=row["tenancy_id"],
        amount=row["amount"] or 0,
        created_at=row["created_at"],
        due_date=row["due_date"],
        status=row["status"],
        method=row["method"],
    )


class TenancyService:
    """Tenancy reads, applications and status transitions."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _load(self, conn: sqlite3.Connection, where: str = "", params: tuple = ()) -> List[Tenancy]:
        rows = conn.execute(f"{_TENANCY_SELECT} {where} ORDER BY t.created_at DESC, t.rowid DESC", params).fetchall()
        if not rows:
            return []

        ids = [row["id"] for row in rows]
        marks = ",".join("?" * len(ids))

        tenants: Dict[str, List[TenancyTenant]] = defaultdict(list)
        for row in conn.execute(
            f"""
            SELECT tt.id, tt.tenancy_id, tt.tenant_id, pr.full_name, pr.email
            FROM tenancy_tenants tt
            LEFT JOIN profiles pr ON pr.id = tt.tenant_id
            WHERE tt.tenancy_id IN ({marks})
            ORDER BY tt.created_at
            """,
            ids,
        ):
            tenants[row["tenancy_id"]].append(TenancyTenant(
                id=row["id"],
                tenant_id=row["tenant_id"],
                tenant=TenantInfo(full_name=row["full_name"] or "", email=row["email"] or ""),
            ))

        payments: Dict[str, List[Payment]] = defaultdict(list)
        for row in conn.execute(
            f"""
            SELECT id, tenancy_id, amount, created_at, due_date, status, method
            FROM payments WHERE tenancy_id IN ({marks})
            ORDER BY created_at DESC, rowid DESC
            """,
            ids,
        ):
            payments[row["tenancy_id"]].append(_to_payment(row))

        return [
            Tenancy(
                id=row["id"],
                unit_id=row["unit_id"],
                status=TenancyStatus(row["status"]),
                start_date=row["start_date"],
                end_date=row["end_date"],
                created_at=row["created_at"],
                unit=TenancyUnit(
                    id=row["unit_id"],
                    name=row["unit_name"],
                    rent_amount=row["rent_amount"] or 0,
                    property=PropertySummary(
                        id=row["property_id"],
                        name=row["property_name"],
                        address=row["address"],
                        landlord_id=row["landlord_id"],
                    ),
                ),
                tenants=tenants[row["id"]],
                payments=payments[row["id"]],
            )
            for row in rows
        ]

    def list_tenancies(self, ctx: RequestContext) -> List[Tenancy]:
        """Tenancies visible to the caller, newest first."""
        if ctx.role == Role.ADMIN:
            where, params = "", ()
        elif ctx.role == Role.LANDLORD:
            where, params = f"WHERE p.landlord_id = ? OR {_PARTICIPANT}", (ctx.user_id, ctx.user_id)
        else:
            where, params = f"WHERE {_PARTICIPANT}", (ctx.user_id,)

        with storage_errors("Error fetching tenancies"):
            conn = get_connection(self.db_path)
            try:
                return self._load(conn, where, params)
            finally:
                conn.close()

    def get_tenancy(self, tenancy_id: str) -> Tenancy:
        with storage_errors("Error fetching tenancies"):
            conn = get_connection(self.db_path)
            try:
                found = self._load(conn, "WHERE t.id = ?", (tenancy_id,))
            finally:
                conn.close()
        if not found:
            raise NotFoundError("Tenancy not found", f"No tenancy with id {tenancy_id}")
        return found[0]

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------

    @staticmethod
    def is_participant(ctx: RequestContext, tenancy: Tenancy) -> bool:
        return any(t.tenant_id == ctx.user_id for t in tenancy.tenants)

    @staticmethod
    def is_owner(ctx: RequestContext, tenancy: Tenancy) -> bool:
        prop = tenancy.unit.property if tenancy.unit else None
        return prop is not None and prop.landlord_id == ctx.user_id

    def can_view(self, ctx: RequestContext, tenancy: Tenancy) -> bool:
        return ctx.is_admin or self.is_owner(ctx, tenancy) or self.is_participant(ctx, tenancy)

    def can_manage(self, ctx: RequestContext, tenancy: Tenancy) -> bool:
        return ctx.is_admin or self.is_owner(ctx, tenancy)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_tenancy(self, ctx: RequestContext, body: TenancyCreate) -> Tenancy:
        """
        Apply for a unit. The tenancy and the caller's participant row are
        written as two separate commits; a failure on the second leaves the
        tenancy without participants.
        """
        if body.end_date is not None and body.end_date < body.start_date:
            raise ConflictError("Error creating tenancy", "End date must not be before start date")

        tenancy_id = str(uuid.uuid4())
        with storage_errors("Error creating tenancy"):
            conn = get_connection(self.db_path)
            try:
                unit = conn.execute("SELECT is_available FROM units WHERE id = ?", (body.unit_id,)).fetchone()
                if unit is None:
                    raise NotFoundError("Error creating tenancy", "Unit not found")
                if not unit["is_available"]:
                    raise ConflictError("Error creating tenancy", "Unit is not available")

                conn.execute(
                    """
                    INSERT INTO tenancies (id, unit_id, status, start_date, end_date, created_at)
                    VALUES (?, ?, 'pending', ?, ?, ?)
                    """,
                    (tenancy_id, body.unit_id, body.start_date.isoformat(),
                     body.end_date.isoformat() if body.end_date else None, datetime.now().isoformat()),
                )
                conn.commit()
            finally:
                conn.close()

        self._insert_participant(tenancy_id, ctx.user_id, "Error creating tenancy")
        logger.info(f"[TENANCIES] {ctx.user_id} applied for unit {body.unit_id} ({tenancy_id})")
        return self.get_tenancy(tenancy_id)

    def _insert_participant(self, tenancy_id: str, tenant_id: str, title: str) -> None:
        with storage_errors(title):
            conn = get_connection(self.db_path)
            try:
                conn.execute(
                    "INSERT INTO tenancy_tenants (id, tenancy_id, tenant_id, created_at) VALUES (?, ?, ?, ?)",
                    (str(uuid.uuid4()), tenancy_id, tenant_id, datetime.now().isoformat()),
                )
                conn.commit()
            finally:
                conn.close()

    def update_status(
        self,
        ctx: RequestContext,
        tenancy_id: str,
        status: TenancyStatus,
        allowed_from: Optional[Sequence[TenancyStatus]] = None,
        refusal: str = "This status change is not allowed",
    ) -> Tenancy:
        """
        Move a tenancy to `status`. Entering active marks the unit
        unavailable; leaving active frees it unless another active
        tenancy still holds it.

        With `allowed_from`, tenancies in any other status are refused.
        """
        tenancy = self.get_tenancy(tenancy_id)
        if not self.can_manage(ctx, tenancy):
            raise PermissionDeniedError(
                "Error updating tenancy", "Only the property owner or an admin can change a tenancy"
            )
        if allowed_from is not None and tenancy.status not in allowed_from:
            raise ConflictError("Error updating tenancy", refusal)
        if tenancy.status == status:
            return tenancy

        with storage_errors("Error updating tenancy"):
            conn = get_connection(self.db_path)
            try:
                if status == TenancyStatus.ACTIVE:
                    # Not enforced: at most one active tenancy per unit
                    others = conn.execute(
                        "SELECT COUNT(*) FROM tenancies WHERE unit_id = ? AND status = 'active' AND id != ?",
                        (tenancy.unit_id, tenancy_id),
                    ).fetchone()[0]
                    if others:
                        logger.warning(
                            f"[TENANCIES] Unit {tenancy.unit_id} already has {others} active tenancy(ies); "
                            f"activating {tenancy_id} anyway"
                        )

                conn.execute("UPDATE tenancies SET status = ? WHERE id = ?", (status.value, tenancy_id))
                if TenancyStatus.ACTIVE in (status, tenancy.status):
                    # Unit is available exactly when no active tenancy holds it
                    conn.execute(
                        """
                        UPDATE units SET is_available = NOT EXISTS (
                            SELECT 1 FROM tenancies WHERE unit_id = ? AND status = 'active'
                        )
                        WHERE id = ?
                        """,
                        (tenancy.unit_id, tenancy.unit_id),
                    )
                conn.commit()
            finally:
                conn.close()

        logger.info(f"[TENANCIES] {tenancy_id}: {tenancy.status.value} -> {status.value} by {ctx.user_id}")
        return self.get_tenancy(tenancy_id)

    def approve(self, ctx: RequestContext, tenancy_id: str) -> Tenancy:
        return self.update_status(
            ctx, tenancy_id, TenancyStatus.ACTIVE,
            allowed_from=(TenancyStatus.PENDING,),
            refusal="Only pending tenancies can be approved",
        )

    def reject(self, ctx: RequestContext, tenancy_id: str) -> Tenancy:
        return self.update_status(
            ctx, tenancy_id, TenancyStatus.ENDED,
            allowed_from=(TenancyStatus.PENDING, TenancyStatus.ACTIVE),
            refusal="Only pending or active tenancies can be rejected",
        )

    def add_tenant(self, ctx: RequestContext, tenancy_id: str, tenant_id: str) -> Tenancy:
        """Add another tenant participant to a tenancy."""
        tenancy = self.get_tenancy(tenancy_id)
        if not (self.can_manage(ctx, tenancy) or self.is_participant(ctx, tenancy)):
            raise PermissionDeniedError("Error adding tenant", "You are not part of this tenancy")
        if any(t.tenant_id == tenant_id for t in tenancy.tenants):
            raise ConflictError("Error adding tenant", "Tenant is already on this tenancy")

        with storage_errors("Error adding tenant"):
            conn = get_connection(self.db_path)
            try:
                exists = conn.execute("SELECT 1 FROM profiles WHERE id = ?", (tenant_id,)).fetchone()
            finally:
                conn.close()
        if not exists:
            raise NotFoundError("Error adding tenant", "Tenant profile not found")

        self._insert_participant(tenancy_id, tenant_id, "Error adding tenant")
        logger.info(f"[TENANCIES] Added tenant {tenant_id} to {tenancy_id}")
        return self.get_tenancy(tenancy_id)
