"""
Dashboard response models.

The dashboard endpoint returns exactly one of three variants, tagged by
the `role` field.
"""
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from rentwise.db.features import FeatureAvailability
from rentwise.models.records import (
    Agreement,
    MaintenanceRequest,
    Notification,
    Payment,
    Profile,
    Tenancy,
    Unit,
)


class RentStatusLabel(str, Enum):
    NO_DUE = "No Due"
    OVERDUE = "Overdue"
    DUE_TODAY = "Due Today"
    DUE_SOON = "Due Soon"
    CURRENT = "Current"


class RentStatus(BaseModel):
    label: RentStatusLabel
    color: str      # "neutral" | "danger" | "warning" | "success"
    urgent: bool


class RentSummary(BaseModel):
    """Status derivation output for one tenant."""
    active_tenancy: Optional[Tenancy] = None
    payments: List[Payment] = []
    next_due_payment: Optional[Payment] = None
    next_due_date: Optional[str] = None
    days_till_due: Optional[int] = None
    rent_status: RentStatus
    total_due: float = 0


class PaymentMethod(BaseModel):
    id: str
    name: str
    description: str
    popular: bool = False


class PaymentSummary(BaseModel):
    timeframe: str
    period_start: str
    period_end: str
    total_amount: float
    total_count: int
    period_amount: float
    period_count: int


class TenancyCounts(BaseModel):
    pending: int = 0
    active: int = 0
    ended: int = 0


class PropertyOccupancy(BaseModel):
    property_id: str
    name: str
    occupied: int
    available: int
    units: List[Unit] = []


class RecentPayment(BaseModel):
    tenancy_id: str
    property_name: Optional[str] = None
    unit_name: Optional[str] = None
    last_payment: Payment


class AdminDashboard(BaseModel):
    role: Literal["admin"] = "admin"
    profile: Profile
    total_properties: int
    total_units: int
    tenancies_by_status: TenancyCounts
    total_payments: int
    platform_revenue: float
    pending_approvals: List[Tenancy] = []
    recent_tenancies: List[Tenancy] = []
    notifications: List[Notification] = []


class LandlordDashboard(BaseModel):
    role: Literal["landlord"] = "landlord"
    profile: Profile
    total_properties: int
    total_units: int
    available_units: int
    active_tenancies: int
    pending_tenancies: int
    monthly_revenue: float      # rent of units under active tenancies
    collected_revenue: float    # payments received on own tenancies
    pending_approvals: List[Tenancy] = []
    property_overview: List[PropertyOccupancy] = []
    recent_payments: List[RecentPayment] = []
    notifications: List[Notification] = []


class TenantDashboard(BaseModel):
    role: Literal["tenant"] = "tenant"
    profile: Profile
    tenancies: List[Tenancy] = []
    rent: RentSummary
    agreements: List[Agreement] = []
    maintenance_requests: List[MaintenanceRequest] = []
    payment_methods: List[PaymentMethod] = []
    features: FeatureAvailability
    notifications: List[Notification] = []


Dashboard = Annotated[
    Union[AdminDashboard, LandlordDashboard, TenantDashboard],
    Field(discriminator="role"),
]
