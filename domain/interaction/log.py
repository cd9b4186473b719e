"""
Interaction log: the audit trail of every provider exchange made while
serving one inbound request.

A request owns exactly one InteractionLogs. Each provider call happens
inside a span opened with `enter(kind)`; opening the next span archives the
previous one, and `into_inner()` archives whatever is still open. Spans are
never shared between requests.
"""
from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


GATEWAY_NAME = "stbl"


class InteractionRequest(BaseModel):
    url: str
    params: str


class InteractionLog(BaseModel):
    """Archived span as returned to the platform in `logs[]`."""

    gateway: str = GATEWAY_NAME
    request: Optional[InteractionRequest] = None
    status: Optional[int] = None
    response: Optional[str] = None
    kind: str
    created_at: datetime
    duration: float = Field(ge=0)


class InteractionSpan:
    """Mutable writer for the currently open span."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self.created_at = datetime.now(timezone.utc)
        self._started = time.monotonic()
        self.request: Optional[InteractionRequest] = None
        self.status: Optional[int] = None
        self.response: Optional[str] = None

    def set_request(self, params: str, url: str) -> None:
        self.request = InteractionRequest(url=url, params=params)

    def set_status(self, status: int) -> None:
        self.status = status

    def set_response(self, response: str) -> None:
        self.response = response

    def close(self) -> InteractionLog:
        return InteractionLog(
            request=self.request,
            status=self.status,
            response=self.response,
            kind=self.kind,
            created_at=self.created_at,
            duration=time.monotonic() - self._started,
        )

    def __repr__(self) -> str:
        return f"InteractionSpan(kind={self.kind!r}, status={self.status!r})"


class InteractionLogs:
    """Ordered span archive plus at most one open span."""

    def __init__(self) -> None:
        self._logs: list[InteractionLog] = []
        self.current: Optional[InteractionSpan] = None

    def enter(self, kind: str) -> InteractionSpan:
        """Archive the open span (if any) and open a new one."""
        self._archive_current()
        self.current = InteractionSpan(kind)
        return self.current

    def into_inner(self) -> list[InteractionLog]:
        """Close the open span and return every archived span in order."""
        self._archive_current()
        return list(self._logs)

    def _archive_current(self) -> None:
        if self.current is not None:
            self._logs.append(self.current.close())
            self.current = None

    def __len__(self) -> int:
        return len(self._logs) + (1 if self.current is not None else 0)
