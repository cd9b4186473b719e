"""
Provider callback routes.

The provider posts asynchronous status changes here; each one is resolved
to the platform transaction through the stored token mapping and relayed
as a signed callback. Rejections surface as HTTP 400 via the exception
handlers.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from application.dtos.payments import PaymentCallback, PayoutCallback
from application.services.payment_service import GatewayConnectService
from api.dependencies import get_connect_service
from core.response import model_response


router = APIRouter(prefix="/callback", tags=["Callbacks"])


@router.post("/pay")
async def payment_callback(
    callback: PaymentCallback,
    service: GatewayConnectService = Depends(get_connect_service),
):
    return model_response(await service.handle_payment_callback(callback))


@router.post("/payout")
async def payout_callback(
    callback: PayoutCallback,
    service: GatewayConnectService = Depends(get_connect_service),
):
    return model_response(await service.handle_payout_callback(callback))
