"""
Dashboard API routes - Rentwise
The role-specific dashboard plus the records it draws on that may not
exist in every deployment (agreements, maintenance requests).
"""
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from rentwise.api.auth import get_request_context
from rentwise.db.features import FeatureAvailability, detect_features
from rentwise.models import (
    Agreement,
    Dashboard,
    MaintenanceRequest,
    MaintenanceRequestCreate,
    Notification,
    RequestContext,
    Role,
)
from rentwise.services.dashboard_service import DashboardService

router = APIRouter(tags=["Dashboard"])

dashboard_service = DashboardService()


class MaintenanceRequestResponse(BaseModel):
    request: MaintenanceRequest
    notification: Notification


@router.get("/dashboard", response_model=Dashboard)
async def get_dashboard(ctx: RequestContext = Depends(get_request_context)):
    """
    GET: Dashboard for the caller's role.

    The `role` field tells which of the three shapes came back. Sections
    that failed to load are empty, with a matching entry in `notifications`.
    """
    return dashboard_service.compose(ctx)


@router.get("/features", response_model=FeatureAvailability)
async def get_features(ctx: RequestContext = Depends(get_request_context)):
    """GET: Which optional tables this deployment has."""
    return detect_features()


@router.get("/agreements", response_model=List[Agreement])
async def list_agreements(ctx: RequestContext = Depends(get_request_context)):
    tenancies = dashboard_service.tenancies.list_tenancies(ctx)
    return dashboard_service.agreements.list_agreements(ctx, tenancies)


@router.get("/maintenance-requests", response_model=List[MaintenanceRequest])
async def list_maintenance_requests(ctx: RequestContext = Depends(get_request_context)):
    tenancies = dashboard_service.tenancies.list_tenancies(ctx)
    owned = []
    if ctx.role == Role.LANDLORD:
        owned = [p.id for p in dashboard_service.properties.list_properties(ctx.user_id)]
    return dashboard_service.maintenance.list_requests(ctx, tenancies, owned)


@router.post("/maintenance-requests", response_model=MaintenanceRequestResponse)
async def create_maintenance_request(
    body: MaintenanceRequestCreate,
    ctx: RequestContext = Depends(get_request_context),
):
    tenancies = dashboard_service.tenancies.list_tenancies(ctx)
    request = dashboard_service.maintenance.create_request(ctx, body, tenancies)
    return MaintenanceRequestResponse(
        request=request, notification=Notification(title="Maintenance request submitted")
    )
