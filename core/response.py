"""
统一响应格式定义

The platform speaks its own dialect: `{result, logs, ...}` on success and
`{result: false, error, logs}` on failure. Absent optional fields are
omitted from the wire.
"""
from typing import Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette import status as http_status

from application.dtos.payments import ConnectError


def model_response(model: BaseModel, status_code: int = http_status.HTTP_200_OK) -> JSONResponse:
    """序列化响应模型，省略值为 None 的字段"""
    return JSONResponse(
        status_code=status_code,
        content=model.model_dump(mode="json", exclude_none=True),
    )


def error_response(
    message: str,
    status_code: int = http_status.HTTP_400_BAD_REQUEST,
    logs: Optional[list] = None,
) -> JSONResponse:
    """
    创建错误响应（connect 错误格式）

    Args:
        message: 错误消息
        status_code: HTTP状态码
        logs: 已归档的交互日志

    Returns:
        JSONResponse: `{result: false, error, logs}`
    """
    return model_response(ConnectError(error=message, logs=logs or []), status_code=status_code)
