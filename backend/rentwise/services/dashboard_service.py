"""
Dashboard Service - Rentwise
Builds one of three dashboards (admin, landlord, tenant) for the caller's
role.

Fetch failures do not fail the dashboard: the affected section is empty
and a notification explains what could not be loaded.
"""
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from rentwise.config import get_settings
from rentwise.db.features import detect_features
from rentwise.errors import DataAccessError
from rentwise.models import (
    AdminDashboard,
    LandlordDashboard,
    Notification,
    Property,
    PropertyOccupancy,
    RecentPayment,
    RequestContext,
    Role,
    Tenancy,
    TenancyCounts,
    TenancyStatus,
    TenantDashboard,
)
from rentwise.services.agreement_service import AgreementService
from rentwise.services.maintenance_service import MaintenanceService
from rentwise.services.payment_methods import list_payment_methods
from rentwise.services.property_service import PropertyService
from rentwise.services.rent_status import derive_rent_summary
from rentwise.services.tenancy_service import TenancyService

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5


# =============================================================================
# Aggregates
# =============================================================================

def count_units(properties: Sequence[Property]) -> int:
    return sum(len(p.units) for p in properties)


def count_available_units(properties: Sequence[Property]) -> int:
    return sum(1 for p in properties for u in p.units if u.is_available)


def count_by_status(tenancies: Sequence[Tenancy]) -> TenancyCounts:
    counts = TenancyCounts()
    for t in tenancies:
        setattr(counts, t.status.value, getattr(counts, t.status.value) + 1)
    return counts


def with_status(tenancies: Sequence[Tenancy], status: TenancyStatus) -> List[Tenancy]:
    return [t for t in tenancies if t.status == status]


def total_paid(tenancies: Sequence[Tenancy]) -> float:
    """Sum of every payment amount across the tenancies."""
    return round(sum(p.amount for t in tenancies for p in t.payments), 2)


def rent_roll(tenancies: Sequence[Tenancy]) -> float:
    """Monthly rent of units under active tenancies."""
    return round(
        sum(t.unit.rent_amount for t in with_status(tenancies, TenancyStatus.ACTIVE) if t.unit), 2
    )


def tenancies_on_properties(tenancies: Sequence[Tenancy], properties: Sequence[Property]) -> List[Tenancy]:
    """Tenancies whose unit belongs to one of `properties`."""
    unit_ids = {u.id for p in properties for u in p.units}
    return [t for t in tenancies if t.unit_id in unit_ids]


def property_overview(properties: Sequence[Property]) -> List[PropertyOccupancy]:
    return [
        PropertyOccupancy(
            property_id=p.id,
            name=p.name,
            occupied=sum(1 for u in p.units if not u.is_available),
            available=sum(1 for u in p.units if u.is_available),
            units=p.units,
        )
        for p in properties
    ]


def recent_payments(tenancies: Sequence[Tenancy], limit: int = RECENT_LIMIT) -> List[RecentPayment]:
    """Latest payment of each tenancy that has one (payments are newest first)."""
    results = []
    for t in tenancies:
        if not t.payments:
            continue
        prop = t.unit.property if t.unit else None
        results.append(RecentPayment(
            tenancy_id=t.id,
            property_name=prop.name if prop else None,
            unit_name=t.unit.name if t.unit else None,
            last_payment=t.payments[0],
        ))
        if len(results) >= limit:
            break
    return results


# =============================================================================
# Composer
# =============================================================================

class DashboardService:
    """Role-dispatched dashboard composition."""

    def __init__(
        self,
        property_service: Optional[PropertyService] = None,
        tenancy_service: Optional[TenancyService] = None,
        agreement_service: Optional[AgreementService] = None,
        maintenance_service: Optional[MaintenanceService] = None,
    ):
        self.properties = property_service or PropertyService()
        self.tenancies = tenancy_service or TenancyService()
        self.agreements = agreement_service or AgreementService()
        self.maintenance = maintenance_service or MaintenanceService()
        self._builders: Dict[Role, Callable] = {
            Role.ADMIN: self.admin_dashboard,
            Role.LANDLORD: self.landlord_dashboard,
            Role.TENANT: self.tenant_dashboard,
        }

    def compose(self, ctx: RequestContext, now: Optional[datetime] = None):
        builder = self._builders.get(ctx.role)
        if builder is None:
            raise ValueError(f"No dashboard for role: {ctx.role}")
        return builder(ctx, now)

    @staticmethod
    def _fetch(notifications: List[Notification], fetch: Callable, *args) -> list:
        try:
            return fetch(*args)
        except DataAccessError as e:
            logger.warning(f"[DASHBOARD] {e.title}: {e.description}")
            notifications.append(Notification(title=e.title, description=e.description, variant="destructive"))
            return []

    def admin_dashboard(self, ctx: RequestContext, now: Optional[datetime] = None) -> AdminDashboard:
        notes: List[Notification] = []
        properties = self._fetch(notes, self.properties.list_properties)
        tenancies = self._fetch(notes, self.tenancies.list_tenancies, ctx)

        return AdminDashboard(
            profile=ctx.profile,
            total_properties=len(properties),
            total_units=count_units(properties),
            tenancies_by_status=count_by_status(tenancies),
            total_payments=sum(len(t.payments) for t in tenancies),
            platform_revenue=total_paid(tenancies),
            pending_approvals=with_status(tenancies, TenancyStatus.PENDING)[:RECENT_LIMIT],
            recent_tenancies=list(tenancies[:RECENT_LIMIT]),
            notifications=notes,
        )

    def landlord_dashboard(self, ctx: RequestContext, now: Optional[datetime] = None) -> LandlordDashboard:
        notes: List[Notification] = []
        properties = self._fetch(notes, self.properties.list_properties, ctx.user_id)
        tenancies = tenancies_on_properties(self._fetch(notes, self.tenancies.list_tenancies, ctx), properties)
        pending = with_status(tenancies, TenancyStatus.PENDING)

        return LandlordDashboard(
            profile=ctx.profile,
            total_properties=len(properties),
            total_units=count_units(properties),
            available_units=count_available_units(properties),
            active_tenancies=len(with_status(tenancies, TenancyStatus.ACTIVE)),
            pending_tenancies=len(pending),
            monthly_revenue=rent_roll(tenancies),
            collected_revenue=total_paid(tenancies),
            pending_approvals=pending,
            property_overview=property_overview(properties),
            recent_payments=recent_payments(tenancies),
            notifications=notes,
        )

    def tenant_dashboard(self, ctx: RequestContext, now: Optional[datetime] = None) -> TenantDashboard:
        notes: List[Notification] = []
        tenancies = self._fetch(notes, self.tenancies.list_tenancies, ctx)

        return TenantDashboard(
            profile=ctx.profile,
            tenancies=tenancies,
            rent=derive_rent_summary(tenancies, now, get_settings().due_soon_days),
            agreements=self._fetch(notes, self.agreements.list_agreements, ctx, tenancies),
            maintenance_requests=self._fetch(notes, self.maintenance.list_requests, ctx, tenancies),
            payment_methods=list_payment_methods(),
            features=detect_features(self.tenancies.db_path),
            notifications=notes,
        )
