"""
Payment Service - Rentwise
Lists and records rent payments. Payments are immutable once recorded.
"""
import logging
import sqlite3
import uuid
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Sequence

from rentwise.db.schema import get_connection
from rentwise.errors import ConflictError, PermissionDeniedError, storage_errors
from rentwise.models import (
    Payment,
    PaymentCreate,
    PaymentDetail,
    PaymentSummary,
    RequestContext,
    Role,
    TenancyStatus,
    Timeframe,
)
from rentwise.services.payment_methods import get_payment_method
from rentwise.services.tenancy_service import TenancyService
from rentwise.services.timeframe import get_date_range, is_in_period, parse_date

logger = logging.getLogger(__name__)

_PAYMENT_SELECT = """
    SELECT pay.id, pay.tenancy_id, pay.amount, pay.created_at, pay.due_date, pay.status, pay.method,
           u.name AS unit_name, p.name AS property_name, p.address AS property_address
    FROM payments pay
    JOIN tenancies t ON t.id = pay.tenancy_id
    JOIN units u ON u.id = t.unit_id
    JOIN properties p ON p.id = u.property_id
"""

_PARTICIPANT = "t.id IN (SELECT tenancy_id FROM tenancy_tenants WHERE tenant_id = ?)"


def _to_detail(row: sqlite3.Row) -> PaymentDetail:
    return PaymentDetail(
        id=row["id"],
        tenancy_id=row["tenancy_id"],
        amount=row["amount"] or 0,
        created_at=row["created_at"],
        due_date=row["due_date"],
        status=row["status"],
        method=row["method"],
        unit_name=row["unit_name"],
        property_name=row["property_name"],
        property_address=row["property_address"],
    )


def summarize_payments(
    payments: Sequence[Payment],
    timeframe: Timeframe = Timeframe.CM,
    reference_date: Optional[date] = None,
) -> PaymentSummary:
    """Totals over all payments and over the timeframe window (by creation date)."""
    start, end = get_date_range(timeframe, reference_date)
    in_period = [p for p in payments if is_in_period(parse_date(p.created_at), start, end)]
    return PaymentSummary(
        timeframe=timeframe.value,
        period_start=start.isoformat(),
        period_end=end.isoformat(),
        total_amount=round(sum(p.amount for p in payments), 2),
        total_count=len(payments),
        period_amount=round(sum(p.amount for p in in_period), 2),
        period_count=len(in_period),
    )


class PaymentService:
    """Payments visible to the caller, and payment recording."""

    def __init__(self, db_path: Optional[Path] = None, tenancy_service: Optional[TenancyService] = None):
        self.db_path = db_path
        self.tenancies = tenancy_service or TenancyService(db_path)

    def list_payments(self, ctx: RequestContext) -> List[PaymentDetail]:
        """Newest first, scoped the same way as tenancies."""
        if ctx.role == Role.ADMIN:
            where, params = "", ()
        elif ctx.role == Role.LANDLORD:
            where, params = f"WHERE p.landlord_id = ? OR {_PARTICIPANT}", (ctx.user_id, ctx.user_id)
        else:
            where, params = f"WHERE {_PARTICIPANT}", (ctx.user_id,)

        with storage_errors("Error fetching payments"):
            conn = get_connection(self.db_path)
            try:
                rows = conn.execute(
                    f"{_PAYMENT_SELECT} {where} ORDER BY pay.created_at DESC, pay.rowid DESC", params
                ).fetchall()
            finally:
                conn.close()
        return [_to_detail(row) for row in rows]

    def record_payment(self, ctx: RequestContext, body: PaymentCreate) -> PaymentDetail:
        """Record a payment against an active tenancy the caller belongs to or manages."""
        tenancy = self.tenancies.get_tenancy(body.tenancy_id)
        if not self.tenancies.can_view(ctx, tenancy):
            raise PermissionDeniedError("Error recording payment", "You are not part of this tenancy")
        if tenancy.status != TenancyStatus.ACTIVE:
            raise ConflictError("Error recording payment", "Payments can only be recorded on active tenancies")
        if body.method is not None:
            try:
                get_payment_method(body.method)
            except ValueError as e:
                raise ConflictError("Error recording payment", str(e)) from e

        payment_id = str(uuid.uuid4())
        with storage_errors("Error recording payment"):
            conn = get_connection(self.db_path)
            try:
                conn.execute(
                    """
                    INSERT INTO payments (id, tenancy_id, amount, created_at, due_date, status, method)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        payment_id,
                        body.tenancy_id,
                        body.amount,
                        datetime.now().isoformat(),
                        body.due_date.isoformat() if body.due_date else None,
                        body.status.value if body.status else None,
                        body.method,
                    ),
                )
                conn.commit()
                row = conn.execute(f"{_PAYMENT_SELECT} WHERE pay.id = ?", (payment_id,)).fetchone()
            finally:
                conn.close()

        logger.info(f"[PAYMENTS] {ctx.user_id} recorded {body.amount} on {body.tenancy_id}")
        return _to_detail(row)
