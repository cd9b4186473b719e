"""
全局异常处理器

Everything that escapes a route is rendered in the connect error shape
`{result: false, error, logs: []}`. Connect operations themselves return
error bodies with their own logs, so what reaches these handlers are
request decode failures, callback rejections and bugs.
"""
import uuid

from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from starlette import status as http_status

from .response import error_response
from shared.codes import BusinessCode
from core.logging_config import get_logger
from domain.common.exceptions import BusinessException


logger = get_logger(__name__)

# 未列出的业务码按客户端错误处理（callback 拒绝、provider 请求无效等）
_SERVER_SIDE_CODES = {
    BusinessCode.SYSTEM_ERROR: http_status.HTTP_500_INTERNAL_SERVER_ERROR,
    BusinessCode.DATABASE_ERROR: http_status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def business_code_to_http_status(code: int) -> int:
    return _SERVER_SIDE_CODES.get(code, http_status.HTTP_400_BAD_REQUEST)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


def _first_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid request body"
    first = errors[0]
    # loc 以 "body" 开头，去掉后即字段路径
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = first.get("msg", "invalid request body")
    return f"{field}: {message}" if field else message


def register_exception_handlers(app: FastAPI):
    """注册全局异常处理器"""

    @app.exception_handler(BusinessException)
    async def business_exception_handler(request: Request, exc: BusinessException):
        logger.warning(
            "business_exception",
            request_id=_request_id(request),
            code=int(exc.code),
            error_type=exc.error_type,
            error=exc.message,
            details=exc.details,
        )
        return error_response(exc.message, status_code=business_code_to_http_status(exc.code))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        message = _first_validation_error(exc)
        logger.warning("request_decode_failed", request_id=_request_id(request), error=message)
        return error_response(message, status_code=http_status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return error_response(str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "unhandled_exception",
            request_id=_request_id(request),
            error=str(exc),
            exc_info=True,
        )
        return error_response("internal server error", status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR)
