"""
Gateway connect routes: the platform calls these to start payments and
payouts and to poll their status.

Business outcomes (including provider errors) are answered with HTTP 200
and `result: false`; only malformed bodies and unexpected failures use
error status codes.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from application.dtos.payments import ConnectRequest, StatusRequest
from application.services.payment_service import GatewayConnectService
from api.dependencies import get_connect_service
from core.response import model_response


router = APIRouter(tags=["Connect"])


@router.post("/pay")
async def pay(req: ConnectRequest, service: GatewayConnectService = Depends(get_connect_service)):
    return model_response(await service.pay(req))


@router.post("/payout")
async def payout(req: ConnectRequest, service: GatewayConnectService = Depends(get_connect_service)):
    return model_response(await service.payout(req))


@router.post("/status")
async def status(req: StatusRequest, service: GatewayConnectService = Depends(get_connect_service)):
    return model_response(await service.status(req))
