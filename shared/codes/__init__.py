"""
Error codes shared by domain, application and the HTTP layer.

`BusinessCode` holds generic request/system codes; provider and callback
failures live in `shared.codes.payment_codes`. The HTTP status each code
renders with is decided in `core.exceptions`.
"""
from enum import IntEnum


class BusinessCode(IntEnum):
    OK = 0

    # 请求体/参数问题
    PARAM_VALIDATION_ERROR = 10003

    # 通用业务失败
    BUSINESS_ERROR = 20000

    # 系统侧故障（数据库、内部错误）
    SYSTEM_ERROR = 40000
    DATABASE_ERROR = 40001


__all__ = ["BusinessCode"]
