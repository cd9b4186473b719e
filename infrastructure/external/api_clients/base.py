"""
REST API客户端基类

Thin JSON-over-HTTP client used for calls to the business platform. It
returns every HTTP status to the caller as an `APIResponse`; only network
level failures (timeouts, refused connections) raise `APIError`. Nothing is
retried.
"""
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from core.logging_config import get_logger


logger = get_logger(__name__)


@dataclass
class APIResponse:
    status_code: int
    data: Any
    raw_content: bytes
    elapsed_ms: float

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def text(self) -> str:
        return self.raw_content.decode("utf-8", errors="replace")


class APIError(Exception):
    """网络层错误（没有拿到任何 HTTP 响应）"""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.url = url

    def __str__(self):
        return f"{self.message} | url: {self.url}" if self.url else self.message


class BaseAPIClient:
    """
    子类实现具体的接口调用。

    传入共享的 `httpx.AsyncClient` 时由调用方负责关闭；否则首次请求时
    自行创建，并在 `close()` 中关闭。
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        headers: Optional[Dict[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.default_headers = {"Content-Type": "application/json", **(headers or {})}
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
        return self._client

    async def close(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _build_url(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    async def post(
        self,
        endpoint: str,
        json_data: Optional[BaseModel] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> APIResponse:
        """POST a pydantic body (None fields omitted) and wrap whatever comes back."""
        url = self._build_url(endpoint)
        payload = json_data.model_dump(mode="json", exclude_none=True) if json_data is not None else None
        started = time.perf_counter()
        try:
            response = await self.client.post(url, json=payload, headers={**self.default_headers, **(headers or {})})
        except httpx.TimeoutException as exc:
            raise APIError(f"Request timeout after {self.timeout}s", url=url) from exc
        except httpx.HTTPError as exc:
            raise APIError(f"Network error: {exc}", url=url) from exc

        elapsed_ms = (time.perf_counter() - started) * 1000
        data = None
        if "application/json" in response.headers.get("content-type", ""):
            try:
                data = response.json()
            except ValueError:
                logger.warning("api_response_not_json", url=url, status_code=response.status_code)
        logger.debug("api_response", url=url, status_code=response.status_code, elapsed_ms=round(elapsed_ms, 2))
        return APIResponse(
            status_code=response.status_code,
            data=data,
            raw_content=response.content,
            elapsed_ms=elapsed_ms,
        )
