"""
请求日志中间件

Logs one line when a request arrives and one when it completes. Connect
bodies carry provider credentials and merchant private keys, so bodies are
logged only after redaction: credential fields become "***" and card-like
fields get the same masking as interaction spans.
"""
import json
import time
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from core.config import settings
from core.logging_config import get_logger
from shared.masking import secure_value


logger = get_logger(__name__)

REDACTED = "***"


class LoggingMiddleware(BaseHTTPMiddleware):
    SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

    # 按字段名整体替换
    SENSITIVE_FIELDS = {
        "password",
        "secret",
        "access_token",
        "refresh_token",
        "merchant_private_key",
        "authorization",
    }

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.log_body = settings.LOG_REQUEST_BODY_ENABLE_BY_DEFAULT
        self.max_body_bytes = settings.LOG_REQUEST_BODY_MAX_BYTES

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.SKIP_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        context: dict[str, Any] = {"method": request.method}
        if request.method == "POST" and self._wants_body(request):
            context["body"] = await self._body_for_log(request)
        logger.info("request_started", **context)

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                duration=round(time.perf_counter() - started, 4),
                error_type=type(exc).__name__,
                error=str(exc),
                exc_info=True,
            )
            raise

        duration = round(time.perf_counter() - started, 4)
        response.headers["X-Process-Time"] = f"{duration:.3f}"
        if response.status_code >= 500:
            logger.error("request_completed", status_code=response.status_code, duration=duration)
        elif response.status_code >= 400:
            logger.warning("request_completed", status_code=response.status_code, duration=duration)
        else:
            logger.info("request_completed", status_code=response.status_code, duration=duration)
        return response

    def _wants_body(self, request: Request) -> bool:
        # X-Log-Body: true/false 覆盖默认配置
        header = (request.headers.get("X-Log-Body") or "").lower()
        if header in {"true", "1", "yes"}:
            return True
        if header in {"false", "0", "no"}:
            return False
        return self.log_body

    async def _body_for_log(self, request: Request) -> Any:
        body = await request.body()
        if not body:
            return None
        # 超限或无法解析的请求体只记录大小，避免未脱敏内容落入日志
        if len(body) > self.max_body_bytes:
            return {"truncated": True, "size": len(body)}
        try:
            decoded = json.loads(body)
        except ValueError:
            return {"unparsed": True, "size": len(body)}
        return self.sanitize(decoded)

    @classmethod
    def sanitize(cls, data: Any) -> Any:
        if isinstance(data, dict):
            redacted = {
                key: REDACTED if key.lower() in cls.SENSITIVE_FIELDS else cls.sanitize(value)
                for key, value in data.items()
            }
            return secure_value(redacted)
        if isinstance(data, list):
            return [cls.sanitize(item) for item in data]
        return data
