"""
Application service orchestrating gateway connect use-cases.

This class depends only on the application ports and DTOs. Provider clients
and the platform sender are provided by infrastructure and injected from the
composition root (API dependencies), keeping dependencies one-way.

Every platform-facing response, success or error, carries the interaction
log accumulated while serving the request.
"""
from __future__ import annotations

from typing import Any, Callable, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from application.dtos.payments import (
    CallbackPayload,
    CallbackResult,
    ConnectError,
    ConnectRequest,
    ConnectResponse,
    PaymentCallback,
    PayoutCallback,
    RedirectRequest,
    StatusRequest,
    StatusResponse,
)
from application.dtos.stbl import (
    GatewayError,
    PaymentResponse,
    PaymentStatusResponse,
    PayoutResponse,
    PayoutStatusResponse,
)
from application.ports.payment_gateway import (
    PaymentGateway,
    PlatformCallbackSender,
    ProviderAuthenticator,
)
from application.services import callback_signer
from application.services.credential_cache import CredentialCache, ProviderCredentials
from core.logging_config import get_logger
from domain.common.exceptions import (
    BusinessException,
    CallbackRelayError,
    CallbackValidationError,
    TokenMappingNotFoundError,
)
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.interaction import InteractionLogs, InteractionSpan
from domain.payment.entity import TokenMapping, TokenPair
from domain.payment.money import major_to_minor
from domain.payment.status import (
    PlatformStatus,
    payment_to_platform_status,
    payout_to_platform_status,
)


logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

BAD_GATEWAY_RESPONSE = "bad gateway response"
INCORRECT_PROVIDER_RESPONSE = "Incorrect provider response"
UNSUPPORTED_OPERATION = "unsupported operation type"

HTTP_OK = 200
HTTP_CREATED = 201
HTTP_SERVER_ERROR = 500


class _GatewayCallFailed(Exception):
    """Internal short-circuit carrying the error message for the platform."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


def _decode(model: Type[M], raw: bytes) -> Optional[M]:
    try:
        return model.model_validate_json(raw)
    except ValidationError:
        return None


def gateway_error_message(raw: bytes) -> str:
    """Provider `detail` when present, otherwise a generic message."""
    error = _decode(GatewayError, raw)
    if error is not None and error.detail:
        return error.detail
    return BAD_GATEWAY_RESPONSE


class GatewayConnectService:
    def __init__(
        self,
        *,
        credential_cache: CredentialCache,
        uow_factory: Callable[..., AbstractUnitOfWork],
        auth_factory: Callable[[bool], ProviderAuthenticator],
        gateway_factory: Callable[[bool, TokenPair], PaymentGateway],
        platform: PlatformCallbackSender,
        sign_key: str,
        currency: str = "ARS",
    ) -> None:
        self.credential_cache = credential_cache
        self._uow_factory = uow_factory
        self._auth_factory = auth_factory
        self._gateway_factory = gateway_factory
        self.platform = platform
        self._sign_key = sign_key
        self.currency = currency

    # ---- connect ----

    async def pay(self, req: ConnectRequest) -> ConnectResponse | ConnectError:
        logs = InteractionLogs()
        logger.info("gateway_pay_request", token=req.payment.token, lead_id=req.payment.lead_id)
        try:
            gateway = await self._open_gateway(req, logs)
            span = logs.enter("payment")
            response = await self._call(gateway.payment, req, span)
            raw = gateway.read_body(response, span)

            if response.status_code != HTTP_CREATED:
                return self._error(gateway_error_message(raw), logs)

            payment = _decode(PaymentResponse, raw)
            if payment is None:
                return self._error("Failed to deserialize gateway response", logs)
            if payment.id is None:
                return self._error("Payment response missing required fields", logs)

            await self._save_mapping(req, payment.id)
            status = payment_to_platform_status(payment.status_name)
            logger.info("gateway_pay_created", token=req.payment.token, gateway_id=payment.id, status=status.value)
            return ConnectResponse(
                logs=logs.into_inner(),
                redirect_request=RedirectRequest.get_with_processing(payment.pay_form_link or ""),
                status=status.value,
                gateway_token=payment.id,
            )
        except (BusinessException, _GatewayCallFailed) as exc:
            return self._error(exc.message, logs)

    async def payout(self, req: ConnectRequest) -> ConnectResponse | ConnectError:
        logs = InteractionLogs()
        logger.info("gateway_payout_request", token=req.payment.token, lead_id=req.payment.lead_id)
        redirect = RedirectRequest.get_with_processing(req.processing_url)
        try:
            gateway = await self._open_gateway(req, logs)
            span = logs.enter("payout")
            response = await self._call(gateway.payout, req, span)
            raw = gateway.read_body(response, span)
        except (BusinessException, _GatewayCallFailed) as exc:
            return self._error(exc.message, logs)

        # the payout may already be in flight, so contract violations stay pending
        if response.status_code == HTTP_CREATED:
            payout = _decode(PayoutResponse, raw)
            if payout is None or payout.id is None:
                logger.warning("gateway_payout_unreadable_created", token=req.payment.token)
                return self._pending(redirect, logs)

            await self._save_mapping(req, payout.id)
            status = payout_to_platform_status(payout.status_name)
            logger.info("gateway_payout_created", token=req.payment.token, gateway_id=payout.id, status=status.value)
            return ConnectResponse(
                logs=logs.into_inner(),
                redirect_request=redirect,
                status=status.value,
                gateway_token=payout.id,
            )

        if response.status_code >= HTTP_SERVER_ERROR:
            logger.warning("gateway_payout_server_error", token=req.payment.token, status_code=response.status_code)
            return self._pending(redirect, logs)

        error = _decode(GatewayError, raw)
        if error is not None and error.detail:
            return self._error(error.detail, logs)
        return self._pending(redirect, logs)

    async def status(self, req: StatusRequest) -> StatusResponse | ConnectError:
        logs = InteractionLogs()
        operation = req.payment.operation_type
        if operation == "pay":
            model: Type[BaseModel] = PaymentStatusResponse
            to_platform = payment_to_platform_status
        elif operation == "payout":
            model = PayoutStatusResponse
            to_platform = payout_to_platform_status
        else:
            logger.warning("gateway_status_unsupported_operation", operation_type=operation)
            return self._error(UNSUPPORTED_OPERATION, logs)

        logger.info("gateway_status_request", operation_type=operation, gateway_token=req.payment.gateway_token)
        try:
            gateway = await self._open_gateway(req, logs)
            span = logs.enter("status")
            call = gateway.payment_status if operation == "pay" else gateway.payout_status
            response = await self._call(call, req, span)
            raw = gateway.read_body(response, span)
        except (BusinessException, _GatewayCallFailed) as exc:
            return self._error(exc.message, logs)

        if response.status_code != HTTP_OK:
            return self._error(gateway_error_message(raw), logs)

        try:
            provider_status = model.model_validate_json(raw)
        except ValidationError as exc:
            return self._error(f"Failed to deserialize gateway response: {exc.error_count()} error(s)", logs)
        if provider_status.id is None or provider_status.amount is None:
            return self._error(INCORRECT_PROVIDER_RESPONSE, logs)

        return StatusResponse(
            logs=logs.into_inner(),
            status=to_platform(provider_status.status_name).value,
            amount=major_to_minor(provider_status.amount),
        )

    # ---- callbacks ----

    async def handle_payment_callback(self, callback: PaymentCallback) -> CallbackResult:
        logger.info("gateway_payment_callback_received", gateway_id=callback.id, status=callback.status)
        missing = [
            name for name, value in (("id", callback.id), ("status", callback.status), ("amount", callback.amount))
            if value is None
        ]
        if missing:
            logger.error("gateway_callback_invalid", missing=missing)
            raise CallbackValidationError(details={"missing": missing})

        amount = callback.amount
        if callback.new_amount is not None:
            logger.info("gateway_callback_amount_updated", gateway_id=callback.id, new_amount=callback.new_amount)
            amount = callback.new_amount

        status = payment_to_platform_status(callback.status)
        await self._relay(callback.id, status, major_to_minor(amount), callback.status)
        return CallbackResult()

    async def handle_payout_callback(self, callback: PayoutCallback) -> CallbackResult:
        logger.info("gateway_payout_callback_received", gateway_id=callback.payout_id, status=callback.payout_status)
        missing = [
            name for name, value in (
                ("payout_id", callback.payout_id),
                ("payout_status", callback.payout_status),
                ("payout_amount", callback.payout_amount),
            ) if value is None
        ]
        if missing:
            logger.error("gateway_callback_invalid", missing=missing)
            raise CallbackValidationError(details={"missing": missing})

        status = payout_to_platform_status(callback.payout_status)
        await self._relay(callback.payout_id, status, major_to_minor(callback.payout_amount), callback.payout_status)
        return CallbackResult()

    async def _relay(self, gateway_id: str, status: PlatformStatus, amount: int, provider_status: str) -> None:
        try:
            async with self._uow_factory(readonly=True) as uow:
                mapping = await uow.token_mapping_repository.get_by_gateway_id(gateway_id)
        except Exception as exc:
            logger.error("gateway_callback_mapping_read_failed", gateway_id=gateway_id, error=str(exc))
            raise TokenMappingNotFoundError(gateway_id) from exc
        if mapping is None:
            logger.error("gateway_callback_mapping_missing", gateway_id=gateway_id)
            raise TokenMappingNotFoundError(gateway_id)

        payload = CallbackPayload(
            status=status.value,
            currency=self.currency,
            amount=amount,
            reason=provider_status if status is PlatformStatus.DECLINED else None,
        )
        signed = callback_signer.sign(payload, mapping.merchant_private_key, self._sign_key)

        try:
            status_code = await self.platform.send_gateway_callback(mapping.token, payload, signed)
        except BusinessException:
            raise
        except Exception as exc:
            logger.error("gateway_callback_relay_failed", gateway_id=gateway_id, error=str(exc))
            raise CallbackRelayError(details={"error": str(exc)}) from exc
        logger.info("gateway_callback_relayed", gateway_id=gateway_id, token=mapping.token, status_code=status_code)

    # ---- helpers ----

    async def _open_gateway(self, req: ConnectRequest | StatusRequest, logs: InteractionLogs) -> PaymentGateway:
        gateway_settings = req.settings
        credentials = ProviderCredentials(login=gateway_settings.login, password=gateway_settings.password)
        authenticator = self._auth_factory(gateway_settings.sandbox)
        try:
            tokens = await self.credential_cache.resolve_token(credentials, authenticator, logs)
        except BusinessException as exc:
            logger.error("gateway_authentication_failed", login=gateway_settings.login, error=exc.message)
            raise _GatewayCallFailed(f"failed to login client: {exc.message}") from exc
        return self._gateway_factory(gateway_settings.sandbox, tokens)

    @staticmethod
    async def _call(operation: Callable[..., Any], req: Any, span: InteractionSpan) -> Any:
        try:
            return await operation(req, span)
        except BusinessException as exc:
            logger.error("gateway_request_failed", kind=span.kind, error=exc.message)
            raise _GatewayCallFailed(f"Gateway request failed: {exc.message}") from exc

    async def _save_mapping(self, req: ConnectRequest, gateway_id: str) -> None:
        try:
            mapping = TokenMapping(
                gateway_id=gateway_id,
                token=req.payment.token,
                merchant_private_key=req.payment.merchant_private_key,
            )
            async with self._uow_factory() as uow:
                await uow.token_mapping_repository.create(mapping)
        except Exception as exc:
            logger.error("gateway_token_mapping_insert_failed", gateway_id=gateway_id, error=str(exc))

    @staticmethod
    def _pending(redirect: RedirectRequest, logs: InteractionLogs) -> ConnectResponse:
        return ConnectResponse(
            logs=logs.into_inner(),
            redirect_request=redirect,
            status=PlatformStatus.PENDING.value,
        )

    @staticmethod
    def _error(message: str, logs: InteractionLogs) -> ConnectError:
        logger.warning("gateway_connect_error", error=message)
        return ConnectError(error=message, logs=logs.into_inner())

