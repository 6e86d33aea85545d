# Models package - record models plus dashboard response models
from .records import (
    Role,
    TenancyStatus,
    PaymentStatus,
    Timeframe,
    Profile,
    RequestContext,
    Unit,
    PropertyImage,
    Rating,
    Property,
    PropertySummary,
    TenancyUnit,
    TenantInfo,
    TenancyTenant,
    Payment,
    PaymentDetail,
    Tenancy,
    Agreement,
    MaintenanceRequest,
    Notification,
    PropertyCreate,
    PropertyUpdate,
    UnitCreate,
    UnitUpdate,
    RatingCreate,
    TenancyCreate,
    TenancyStatusUpdate,
    TenantAdd,
    PaymentCreate,
    ProfileUpdate,
    MaintenanceRequestCreate,
)
from .dashboard import (
    RentStatusLabel,
    RentStatus,
    RentSummary,
    PaymentMethod,
    PaymentSummary,
    TenancyCounts,
    PropertyOccupancy,
    RecentPayment,
    AdminDashboard,
    LandlordDashboard,
    TenantDashboard,
    Dashboard,
)
