"""
Record models for Rentwise: the rows the data store holds, shaped the way
the API returns them (properties carry their units, images and ratings;
tenancies carry their unit, tenant participants and payments).
"""
from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class Role(str, Enum):
    ADMIN = "admin"
    LANDLORD = "landlord"
    TENANT = "tenant"


class TenancyStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    ENDED = "ended"


class PaymentStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"
    OVERDUE = "overdue"


class Timeframe(str, Enum):
    """
    Reporting windows for payment summaries.
    - CM: Current Month (1st of current month to today)
    - PM: Previous Month (1st to last day of previous month)
    - YTD: Year-to-Date (Jan 1st to today)
    - L30: Last 30 days
    - L7: Last 7 days
    """
    CM = "cm"
    PM = "pm"
    YTD = "ytd"
    L30 = "l30"
    L7 = "l7"


# ---- Profiles ----

class Profile(BaseModel):
    id: str
    full_name: str = ""
    email: str
    role: Role = Role.TENANT
    created_at: Optional[str] = None


class RequestContext(BaseModel):
    """Authenticated caller, resolved once per request and passed explicitly."""
    user_id: str
    profile: Profile

    @property
    def role(self) -> Role:
        return self.profile.role

    @property
    def is_admin(self) -> bool:
        return self.profile.role == Role.ADMIN

    @property
    def is_landlord(self) -> bool:
        return self.profile.role == Role.LANDLORD


# ---- Properties / Units ----

class Unit(BaseModel):
    id: str
    property_id: str
    name: str
    rent_amount: float = 0
    description: Optional[str] = None
    is_available: bool = True


class PropertyImage(BaseModel):
    id: str
    url: str


class Rating(BaseModel):
    rating: int
    comment: Optional[str] = None


class Property(BaseModel):
    id: str
    name: str
    address: str
    landlord_id: str
    created_at: Optional[str] = None
    units: List[Unit] = []
    images: List[PropertyImage] = []
    ratings: List[Rating] = []


# ---- Tenancies / Payments ----

class PropertySummary(BaseModel):
    id: str
    name: str
    address: str
    landlord_id: Optional[str] = None


class TenancyUnit(BaseModel):
    id: str
    name: str
    rent_amount: float = 0
    property: Optional[PropertySummary] = None


class TenantInfo(BaseModel):
    full_name: str = ""
    email: str = ""


class TenancyTenant(BaseModel):
    id: str
    tenant_id: str
    tenant: Optional[TenantInfo] = None


class Payment(BaseModel):
    id: str
    tenancy_id: Optional[str] = None
    amount: float = 0
    created_at: str
    due_date: Optional[str] = None
    status: Optional[PaymentStatus] = None
    method: Optional[str] = None


class Tenancy(BaseModel):
    id: str
    unit_id: str
    status: TenancyStatus
    start_date: str
    end_date: Optional[str] = None
    created_at: Optional[str] = None
    unit: Optional[TenancyUnit] = None
    tenants: List[TenancyTenant] = []
    payments: List[Payment] = []


# ---- Optional records ----

class Agreement(BaseModel):
    id: str
    tenancy_id: Optional[str] = None
    created_at: Optional[str] = None
    status: Optional[str] = None
    title: Optional[str] = None
    file_url: Optional[str] = None


class MaintenanceRequest(BaseModel):
    id: str
    tenant_id: Optional[str] = None
    property_id: Optional[str] = None
    unit_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None


class Notification(BaseModel):
    title: str
    description: Optional[str] = None
    variant: str = "default"  # "default" | "destructive"


# ---- Request bodies ----

class PropertyCreate(BaseModel):
    name: str = Field(min_length=1)
    address: str = Field(min_length=1)


class PropertyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)


class UnitCreate(BaseModel):
    name: str = Field(min_length=1)
    rent_amount: float = Field(ge=0)
    description: Optional[str] = None
    is_available: bool = True


class UnitUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    rent_amount: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    is_available: Optional[bool] = None


class RatingCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None


class TenancyCreate(BaseModel):
    unit_id: str
    start_date: date
    end_date: Optional[date] = None


class TenancyStatusUpdate(BaseModel):
    status: TenancyStatus


class TenantAdd(BaseModel):
    tenant_id: str


class PaymentCreate(BaseModel):
    tenancy_id: str
    amount: float = Field(ge=0)
    due_date: Optional[date] = None
    status: Optional[PaymentStatus] = None
    method: Optional[str] = None


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None


class MaintenanceRequestCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    property_id: Optional[str] = None
    unit_id: Optional[str] = None


class PaymentDetail(Payment):
    """Payment joined with the unit and property it was paid for."""
    unit_name: Optional[str] = None
    property_name: Optional[str] = None
    property_address: Optional[str] = None
