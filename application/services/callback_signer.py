"""
Callback signer - wraps a platform callback into an HS512 token whose
payload also carries the merchant private key encrypted with the server
sign key (AES-256-CBC, PKCS#7).

Token layout::

    b64url({"alg":"HS512","typ":"JWT"}) . b64url({"payload": ..., "secure": ...}) . b64url(hmac_sha512)

where ``secure = {"encrypted_data": b64(ciphertext), "iv_value": b64(iv)}``
uses standard (padded) base64 and the outer segments unpadded base64url.
"""
from __future__ import annotations

import base64
import os
from typing import Any

import jwt
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from application.dtos.payments import CallbackPayload
from domain.common.exceptions import CallbackSigningError
from core.logging_config import get_logger


logger = get_logger(__name__)

IV_SIZE = 16
KEY_SIZE = 32
JWT_ALGORITHM = "HS512"


def _key_bytes(server_sign_key: str | bytes) -> bytes:
    key = server_sign_key.encode("utf-8") if isinstance(server_sign_key, str) else server_sign_key
    if len(key) != KEY_SIZE:
        raise CallbackSigningError(
            "invalid sign key size",
            details={"expected": KEY_SIZE, "actual": len(key)},
        )
    return key


def encrypt_merchant_key(merchant_key: str, key: bytes, iv: bytes) -> dict[str, str]:
    """AES-256-CBC encrypt the merchant key into a secure block."""
    try:
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        plain = padder.update(merchant_key.encode("utf-8")) + padder.finalize()
        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
        cipher_text = encryptor.update(plain) + encryptor.finalize()
    except ValueError as exc:
        raise CallbackSigningError(f"failed to encrypt merchant key: {exc}") from exc
    return {
        "encrypted_data": base64.b64encode(cipher_text).decode("ascii"),
        "iv_value": base64.b64encode(iv).decode("ascii"),
    }


def decrypt_secure_block(secure: dict[str, Any], server_sign_key: str | bytes) -> str:
    """Inverse of the secure block encryption, as performed by the platform."""
    key = _key_bytes(server_sign_key)
    try:
        cipher_text = base64.b64decode(secure["encrypted_data"])
        iv = base64.b64decode(secure["iv_value"])
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(cipher_text) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        return (unpadder.update(padded) + unpadder.finalize()).decode("utf-8")
    except (KeyError, ValueError) as exc:
        raise CallbackSigningError(f"failed to decrypt secure block: {exc}") from exc


def sign(
    payload: CallbackPayload,
    merchant_private_key: str,
    server_sign_key: str | bytes,
    *,
    iv: bytes | None = None,
) -> str:
    key = _key_bytes(server_sign_key)
    iv = iv if iv is not None else os.urandom(IV_SIZE)
    if len(iv) != IV_SIZE:
        raise CallbackSigningError("invalid IV size", details={"expected": IV_SIZE, "actual": len(iv)})

    secure = encrypt_merchant_key(merchant_private_key, key, iv)
    claims = {
        "payload": payload.model_dump(mode="json", exclude_none=True),
        "secure": secure,
    }
    token = jwt.encode(claims, key, algorithm=JWT_ALGORITHM)
    logger.debug("callback_token_signed", status=payload.status, amount=payload.amount)
    return token
