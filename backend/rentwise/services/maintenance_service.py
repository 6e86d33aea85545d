"""
Maintenance Service - Rentwise
Maintenance requests raised by tenants against a property (and optionally
a unit). The maintenance_requests table is optional; without it reads
return an empty list and creation is refused.
"""
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from rentwise.db.features import detect_features
from rentwise.db.schema import get_connection
from rentwise.errors import ConflictError, storage_errors
from rentwise.models import (
    MaintenanceRequest,
    MaintenanceRequestCreate,
    RequestContext,
    Role,
    Tenancy,
)
from rentwise.services.rent_status import active_tenancy

logger = logging.getLogger(__name__)

_COLUMNS = "id, tenant_id, property_id, unit_id, title, description, status, created_at"


def _property_ids(tenancies: Sequence[Tenancy]) -> List[str]:
    seen = []
    for t in tenancies:
        pid = t.unit.property.id if t.unit and t.unit.property else None
        if pid and pid not in seen:
            seen.append(pid)
    return seen


class MaintenanceService:

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path

    def available(self) -> bool:
        return detect_features(self.db_path).maintenance_requests

    def list_requests(
        self,
        ctx: RequestContext,
        tenancies: Sequence[Tenancy],
        owned_property_ids: Sequence[str] = (),
    ) -> List[MaintenanceRequest]:
        """
        Requests visible to the caller.

        Tenants see requests on the properties they rent, or failing that the
        ones they raised themselves. Landlords see requests on their own
        properties. Admins see everything.
        """
        if not self.available():
            return []

        if ctx.role == Role.ADMIN:
            where, params = "", ()
        elif ctx.role == Role.LANDLORD:
            ids = list(owned_property_ids)
            if not ids:
                return []
            where, params = f"WHERE property_id IN ({','.join('?' * len(ids))})", tuple(ids)
        else:
            ids = _property_ids(tenancies)
            if ids:
                where, params = f"WHERE property_id IN ({','.join('?' * len(ids))})", tuple(ids)
            else:
                where, params = "WHERE tenant_id = ?", (ctx.user_id,)

        with storage_errors("Error fetching maintenance requests"):
            conn = get_connection(self.db_path)
            try:
                rows = conn.execute(
                    f"SELECT {_COLUMNS} FROM maintenance_requests {where} ORDER BY created_at DESC", params
                ).fetchall()
            finally:
                conn.close()
        return [MaintenanceRequest(**dict(row)) for row in rows]

    def create_request(
        self, ctx: RequestContext, body: MaintenanceRequestCreate, tenancies: Sequence[Tenancy]
    ) -> MaintenanceRequest:
        """Raise a request; property and unit default to the caller's active tenancy."""
        if not self.available():
            raise ConflictError("Error creating maintenance request", "Maintenance requests are not available")

        property_id, unit_id = body.property_id, body.unit_id
        if property_id is None:
            current = active_tenancy(tenancies)
            if current is not None and current.unit is not None:
                unit_id = unit_id or current.unit.id
                property_id = current.unit.property.id if current.unit.property else None
        if property_id is None:
            raise ConflictError("Error creating maintenance request", "A property is required")

        request = MaintenanceRequest(
            id=str(uuid.uuid4()),
            tenant_id=ctx.user_id,
            property_id=property_id,
            unit_id=unit_id,
            title=body.title,
            description=body.description,
            status="open",
            created_at=datetime.now().isoformat(),
        )
        with storage_errors("Error creating maintenance request"):
            conn = get_connection(self.db_path)
            try:
                conn.execute(
                    f"INSERT INTO maintenance_requests ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    (request.id, request.tenant_id, request.property_id, request.unit_id,
                     request.title, request.description, request.status, request.created_at),
                )
                conn.commit()
            finally:
                conn.close()
        logger.info(f"[MAINTENANCE] {ctx.user_id} opened request {request.id} on {property_id}")
        return request
