"""
Agreement Service - Rentwise
Lease documents attached to tenancies. The agreements table is optional;
when the deployment lacks it every read returns an empty list.
"""
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from rentwise.db.features import detect_features
from rentwise.db.schema import get_connection
from rentwise.errors import storage_errors
from rentwise.models import Agreement, RequestContext, Tenancy

logger = logging.getLogger(__name__)


class AgreementService:

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path

    def available(self) -> bool:
        return detect_features(self.db_path).agreements

    def list_agreements(self, ctx: RequestContext, tenancies: Sequence[Tenancy]) -> List[Agreement]:
        """Agreements for the given (already visibility-filtered) tenancies; admins see all."""
        if not self.available():
            return []

        if ctx.is_admin:
            where, params = "", ()
        else:
            ids = [t.id for t in tenancies]
            if not ids:
                return []
            where = f"WHERE tenancy_id IN ({','.join('?' * len(ids))})"
            params = tuple(ids)

        with storage_errors("Error fetching agreements"):
            conn = get_connection(self.db_path)
            try:
                rows = conn.execute(
                    f"""
                    SELECT id, tenancy_id, created_at, status, title, file_url
                    FROM agreements {where}
                    ORDER BY created_at DESC
                    """,
                    params,
                ).fetchall()
            finally:
                conn.close()
        return [Agreement(**dict(row)) for row in rows]
