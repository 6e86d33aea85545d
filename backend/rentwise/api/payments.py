"""
Payment API routes - Rentwise
Payment history, period summaries, recording and the method catalogue.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from rentwise.api.auth import get_request_context
from rentwise.models import (
    Notification,
    PaymentCreate,
    PaymentDetail,
    PaymentMethod,
    PaymentSummary,
    RequestContext,
    Timeframe,
)
from rentwise.services.payment_methods import list_payment_methods
from rentwise.services.payment_service import PaymentService, summarize_payments

router = APIRouter(tags=["Payments"])

payment_service = PaymentService()


class PaymentResponse(BaseModel):
    payment: PaymentDetail
    notification: Notification


@router.get("/payments", response_model=List[PaymentDetail])
async def list_payments(
    tenancy_id: Optional[str] = Query(None, description="Only payments on this tenancy"),
    ctx: RequestContext = Depends(get_request_context),
):
    """GET: Payments visible to the caller, newest first."""
    payments = payment_service.list_payments(ctx)
    if tenancy_id:
        payments = [p for p in payments if p.tenancy_id == tenancy_id]
    return payments


@router.get("/payments/summary", response_model=PaymentSummary)
async def payment_summary(
    timeframe: Timeframe = Query(Timeframe.CM, description="Timeframe: cm, pm, ytd, l30 or l7"),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    GET: Payment totals for the caller.

    `total_*` covers every visible payment; `period_*` only the ones
    created inside the timeframe window.
    """
    return summarize_payments(payment_service.list_payments(ctx), timeframe)


@router.post("/payments", response_model=PaymentResponse)
async def record_payment(body: PaymentCreate, ctx: RequestContext = Depends(get_request_context)):
    payment = payment_service.record_payment(ctx, body)
    return PaymentResponse(payment=payment, notification=Notification(title="Payment recorded successfully"))


@router.get("/payment-methods", response_model=List[PaymentMethod])
async def payment_methods():
    return list_payment_methods()
