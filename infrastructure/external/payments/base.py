"""
Base payment client implementing shared concerns: http, span recording, logging.

Concrete providers should subclass and implement provider-specific calls.
Every request is recorded into the caller's interaction span: outbound URL
with a masked copy of the body, then the response status. Bodies are decoded
by the caller through `read_body`, which stores a masked copy in the span.
"""
from __future__ import annotations

import json
from typing import Any, Optional

import httpx
from pydantic import BaseModel

from core.logging_config import get_logger
from domain.interaction import InteractionSpan
from infrastructure.external.payments.exceptions import GatewayTransportError
from shared.masking import secure_json, secure_model


logger = get_logger(__name__)


class BasePaymentClient:
    provider: str = "base"

    def __init__(self, *, http: httpx.AsyncClient, base_url: str) -> None:
        self._http = http
        self.base_url = base_url.rstrip("/")

    def _build_url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json"}

    async def make_request(
        self,
        method: str,
        path: str,
        body: Optional[BaseModel],
        span: Optional[InteractionSpan],
        *,
        log_params: Optional[str] = None,
    ) -> httpx.Response:
        """Send one provider request and return the raw response.

        Status-code branching is left to the caller. `log_params` replaces the
        masked body in the span when the body holds secrets the masking rules
        do not cover.
        """
        url = self._build_url(path)
        content: Optional[bytes] = None
        params = ""
        if body is not None:
            payload = body.model_dump(mode="json", exclude_none=True)
            content = json.dumps(payload, separators=(",", ":")).encode("utf-8")
            params = log_params if log_params is not None else secure_model(body)
        if span is not None:
            span.set_request(params, url)
        self._log("gateway_request", method=method, url=url, body=params or None)

        try:
            response = await self._http.request(method, url, content=content, headers=self._headers())
        except httpx.HTTPError as exc:
            self._log("gateway_request_failed", level="error", method=method, url=url, error=str(exc))
            raise GatewayTransportError(f"{method} request failed: {exc}", provider=self.provider, details={"url": url}) from exc

        if span is not None:
            span.set_status(response.status_code)
        self._log("gateway_response", method=method, url=url, status_code=response.status_code)
        return response

    def read_body(self, response: httpx.Response, span: Optional[InteractionSpan]) -> bytes:
        """Return raw body bytes, recording a masked copy into the span."""
        raw = response.content
        try:
            decoded: Any = json.loads(raw)
        except ValueError:
            logger.error("gateway_body_not_json", provider=self.provider, status_code=response.status_code)
            if span is not None:
                span.set_response(raw.decode("utf-8", errors="replace"))
            return raw
        secured = secure_json(decoded)
        logger.debug("gateway_response_body", provider=self.provider, body=secured)
        if span is not None:
            span.set_response(secured)
        return raw

    def _log(self, event: str, level: str = "info", **kwargs) -> None:
        getattr(logger, level)(
            event,
            provider=self.provider,
            **kwargs,
        )
