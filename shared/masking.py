"""
Redaction helpers for payloads written to logs and interaction spans.

Card-like identifiers (`pan`, `cbu`, `cbui`, `number`) keep their first 6
and last 4 characters; verification codes (`cvv`, `cvc`, `cvn`,
`card_verification`) are replaced entirely. Everything else, nested objects
and arrays included, passes through unchanged.
"""
from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel

from core.logging_config import get_logger


logger = get_logger(__name__)

PAN_KEYS = {"pan", "cbu", "cbui", "number"}
CVV_MARKERS = ("cvv", "cvc", "card_verification", "cvn")
CVV_MASK = "***"


def mask_pan(value: str) -> str:
    length = len(value)
    if length > 10:
        return value[:6] + "*" * (length - 10) + value[-4:]
    return value


def is_pan_key(key: str) -> bool:
    return key.lower() in PAN_KEYS


def is_cvv_key(key: str) -> bool:
    k = key.lower()
    return any(marker in k for marker in CVV_MARKERS)


def _scalar_text(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return f"{value:.0f}"
    return None


def secure_value(value: Any) -> Any:
    """Recursively mask sensitive fields of a decoded JSON value."""
    if isinstance(value, dict):
        secured: dict[str, Any] = {}
        for key, item in value.items():
            pan, cvv = is_pan_key(key), is_cvv_key(key)
            if not (pan or cvv):
                secured[key] = secure_value(item)
                continue
            text = _scalar_text(item)
            if text is None:
                secured[key] = item
            elif pan:
                secured[key] = mask_pan(text)
            else:
                secured[key] = CVV_MASK
        return secured
    if isinstance(value, list):
        return [secure_value(item) for item in value]
    return value


def secure_json(data: Any) -> str:
    """Mask and serialize a decoded JSON value; returns "" if it can't be encoded."""
    try:
        return json.dumps(secure_value(data), ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        logger.error("secure_json_failed", error=str(exc))
        return ""


def secure_model(model: BaseModel) -> str:
    return secure_json(model.model_dump(mode="json", exclude_none=True))
