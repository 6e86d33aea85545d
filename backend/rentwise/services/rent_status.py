"""
Rent Status Derivation.

Turns a tenant's tenancies (each carrying its payments) into the signals
the tenant dashboard shows: active tenancy, next due payment, days until
due and a categorical rent status.

Pure functions of their inputs plus the current time. `now` is taken on
every call and never cached, so the same data can move from "Due Soon" to
"Due Today" as time passes.
"""
import math
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence

from rentwise.models import (
    Payment,
    RentStatus,
    RentStatusLabel,
    RentSummary,
    Tenancy,
    TenancyStatus,
)
from rentwise.services.timeframe import parse_datetime

DUE_SOON_DAYS = 7

_ONE_DAY = timedelta(days=1)


def _aware(dt: datetime) -> datetime:
    # Naive values are local time
    return dt if dt.tzinfo is not None else dt.astimezone()


def active_tenancy(tenancies: Sequence[Tenancy]) -> Optional[Tenancy]:
    """First tenancy with status active. At most one is assumed to exist."""
    return next((t for t in tenancies if t.status == TenancyStatus.ACTIVE), None)


def collect_payments(tenancies: Iterable[Tenancy]) -> List[Payment]:
    """Flatten payments across tenancies, filling in a missing tenancy_id."""
    payments = []
    for tenancy in tenancies:
        for payment in tenancy.payments:
            if payment.tenancy_id is None:
                payment = payment.model_copy(update={"tenancy_id": tenancy.id})
            payments.append(payment)
    return payments


def next_due_payment(payments: Iterable[Payment]) -> Optional[Payment]:
    """
    Payment with the earliest due date.

    Payments without a due date, or with one that does not parse, are
    skipped. Ties keep the payment that came first.
    """
    best = None
    best_due = None
    for payment in payments:
        due = parse_datetime(payment.due_date)
        if due is None:
            continue
        due = _aware(due)
        if best_due is None or due < best_due:
            best, best_due = payment, due
    return best


def days_till_due(due: datetime, now: Optional[datetime] = None) -> int:
    """ceil((due - now) / 1 day), computed in local time."""
    if now is None:
        now = datetime.now()
    return math.ceil((_aware(due) - _aware(now)) / _ONE_DAY)


def classify(days: Optional[int], due_soon_days: int = DUE_SOON_DAYS) -> RentStatus:
    """Map days-until-due to a rent status. First matching rule wins."""
    if days is None:
        return RentStatus(label=RentStatusLabel.NO_DUE, color="neutral", urgent=False)
    if days < 0:
        return RentStatus(label=RentStatusLabel.OVERDUE, color="danger", urgent=True)
    if days == 0:
        return RentStatus(label=RentStatusLabel.DUE_TODAY, color="warning", urgent=True)
    if days <= due_soon_days:
        return RentStatus(label=RentStatusLabel.DUE_SOON, color="warning", urgent=True)
    return RentStatus(label=RentStatusLabel.CURRENT, color="success", urgent=False)


def derive_rent_summary(
    tenancies: Sequence[Tenancy],
    now: Optional[datetime] = None,
    due_soon_days: int = DUE_SOON_DAYS,
) -> RentSummary:
    """Everything the tenant dashboard derives from tenancies and payments."""
    if now is None:
        now = datetime.now()

    payments = collect_payments(tenancies)
    next_payment = next_due_payment(payments)

    days = None
    if next_payment is not None:
        days = days_till_due(parse_datetime(next_payment.due_date), now)

    return RentSummary(
        active_tenancy=active_tenancy(tenancies),
        payments=payments,
        next_due_payment=next_payment,
        next_due_date=next_payment.due_date if next_payment else None,
        days_till_due=days,
        rent_status=classify(days, due_soon_days),
        total_due=next_payment.amount if next_payment else 0,
    )
