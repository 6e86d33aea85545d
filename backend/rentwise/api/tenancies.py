"""
Tenancy API routes - Rentwise
Applications, approvals and participants.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from rentwise.api.auth import get_request_context
from rentwise.errors import NotFoundError
from rentwise.models import (
    Notification,
    RequestContext,
    Tenancy,
    TenancyCreate,
    TenancyStatus,
    TenancyStatusUpdate,
    TenantAdd,
)
from rentwise.services.tenancy_service import TenancyService

router = APIRouter(prefix="/tenancies", tags=["Tenancies"])

tenancy_service = TenancyService()


class TenancyResponse(BaseModel):
    tenancy: Tenancy
    notification: Notification


def _visible_tenancy(ctx: RequestContext, tenancy_id: str) -> Tenancy:
    tenancy = tenancy_service.get_tenancy(tenancy_id)
    if not tenancy_service.can_view(ctx, tenancy):
        raise NotFoundError("Tenancy not found", f"No tenancy with id {tenancy_id}")
    return tenancy


def _status_notification(tenancy: Tenancy) -> Notification:
    status = tenancy.status.value
    return Notification(title=f"Tenancy {status}", description=f"The tenancy has been marked as {status}.")


@router.get("",response_model=List[Tenancy])
async def list_tenancies(
    status: Optional[TenancyStatus] = Query(None),
    ctx: RequestContext = Depends(get_request_context),
):
    """GET: Tenancies visible to the caller, newest first."""
    tenancies = tenancy_service.list_tenancies(ctx)
    if status is not None:
        tenancies = [t for t in tenancies if t.status == status]
    return tenancies


@router.get("/{tenancy_id}", response_model=Tenancy)
async def get_tenancy(tenancy_id: str, ctx: RequestContext = Depends(get_request_context)):
    return _visible_tenancy(ctx, tenancy_id)


@router.post("", response_model=TenancyResponse)
async def apply(body: TenancyCreate, ctx: RequestContext = Depends(get_request_context)):
    """POST: Apply for a unit. The tenancy starts out pending."""
    tenancy = tenancy_service.create_tenancy(ctx, body)
    return TenancyResponse(
        tenancy=tenancy,
        notification=Notification(title="Application submitted", description="Waiting for landlord approval"),
    )


@router.post("/{tenancy_id}/approve", response_model=TenancyResponse)
async def approve(tenancy_id: str, ctx: RequestContext = Depends(get_request_context)):
    _visible_tenancy(ctx, tenancy_id)
    tenancy = tenancy_service.approve(ctx, tenancy_id)
    return TenancyResponse(tenancy=tenancy, notification=_status_notification(tenancy))


@router.post("/{tenancy_id}/reject", response_model=TenancyResponse)
async def reject(tenancy_id: str, ctx: RequestContext = Depends(get_request_context)):
    _visible_tenancy(ctx, tenancy_id)
    tenancy = tenancy_service.reject(ctx, tenancy_id)
    return TenancyResponse(tenancy=tenancy, notification=_status_notification(tenancy))


@router.patch("/{tenancy_id}", response_model=TenancyResponse)
async def update_status(
    tenancy_id: str,
    body: TenancyStatusUpdate,
    ctx: RequestContext = Depends(get_request_context),
):
    """PATCH: Move a tenancy to any status (e.g. end an active tenancy)."""
    _visible_tenancy(ctx, tenancy_id)
    tenancy = tenancy_service.update_status(ctx, tenancy_id, body.status)
    return TenancyResponse(tenancy=tenancy, notification=_status_notification(tenancy))


@router.post("/{tenancy_id}/tenants", response_model=TenancyResponse)
async def add_tenant(tenancy_id: str, body: TenantAdd, ctx: RequestContext = Depends(get_request_context)):
    _visible_tenancy(ctx, tenancy_id)
    tenancy = tenancy_service.add_tenant(ctx, tenancy_id, body.tenant_id)
    return TenancyResponse(tenancy=tenancy, notification=Notification(title="Tenant added"))
