"""
Payments API routes.

Keep this thin: no SDK details here. The webhook reads the raw body
because the signature is computed over the exact bytes.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_current_identity, get_payment_service
from application.dtos.payments import ConfirmPaymentRequest, ConfirmPaymentResponse, CreateIntentRequest
from application.services.payment_service import PaymentApplicationService
from core.response import success_response
from domain.user.entity import Identity


router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/create-intent", summary="Create a payment intent")
async def create_intent(
    payload: CreateIntentRequest,
    identity: Identity = Depends(get_current_identity),
    service: PaymentApplicationService = Depends(get_payment_service),
):
    result = await service.create_intent(identity, payload)
    return success_response(data=result, message="Payment intent created")


@router.post("/confirm", summary="Confirm a payment against the gateway")
async def confirm_payment(
    payload: ConfirmPaymentRequest,
    identity: Identity = Depends(get_current_identity),
    service: PaymentApplicationService = Depends(get_payment_service),
):
    payment = await service.confirm(identity, payload)
    return success_response(data=ConfirmPaymentResponse(payment=payment), message="Payment confirmed")


@router.post("/webhook", summary="Gateway webhook")
async def payments_webhook(
    request: Request,
    service: PaymentApplicationService = Depends(get_payment_service),
):
    raw_body = await request.body()
    headers = {k: v for k, v in request.headers.items()}
    ack = await service.handle_webhook(headers, raw_body)
    return success_response(data=ack, message="Webhook received")


@router.get("/me", summary="My payments, one per contest")
async def my_payments(
    identity: Identity = Depends(get_current_identity),
    service: PaymentApplicationService = Depends(get_payment_service),
):
    return success_response(data=await service.list_my_payments(identity))
