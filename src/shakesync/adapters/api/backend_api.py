"""
Cliente REST do backend de shakes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from shakesync.adapters.api.base_api import BaseAPIClient
from shakesync.adapters.api.schemas import (
    ActivityRequest,
    FeedbackRequest,
    LoginRequest,
    PasswordResetRequest,
    RegisterRequest,
    ShakeListResponse,
    ShakeSubmission,
)
from shakesync.config.constants import ENDPOINTS
from shakesync.core.exceptions import InvalidAPIResponseException, wrap_exception
from shakesync.core.interfaces import BackendGateway
from shakesync.core.timestamps import to_iso
from shakesync.infrastructure.logging import debug_log


def parse_shake_list(payload: Any) -> ShakeListResponse:
    """Aceita lista crua, ``{shakes: [...]}``, ``{data: [...]}``, ``{data: {...}}`` ou ``{count}``."""
    if payload is None:
        return ShakeListResponse(shakes=[])
    if isinstance(payload, list):
        payload = {"shakes": [item for item in payload if isinstance(item, dict)]}
    elif isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        payload = payload["data"]
    try:
        return ShakeListResponse.model_validate(payload)
    except ValidationError as e:
        raise wrap_exception(e, InvalidAPIResponseException, "Resposta de shakes inválida")


def shake_items(payload: Any) -> List[Dict[str, Any]]:
    """Itens crus de ``GET /api/shakes``, com campos do backend como ``_id`` intactos."""
    parse_shake_list(payload)
    if isinstance(payload, list):
        items = payload
    elif isinstance(payload, dict):
        source = payload["data"] if isinstance(payload.get("data"), dict) else payload
        items = source.get("shakes") or source.get("data") or []
    else:
        items = []
    return [dict(item) for item in items if isinstance(item, dict)]


class BackendAPI(BaseAPIClient, BackendGateway):
    """Implementação HTTP do BackendGateway."""

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        body = LoginRequest(email=email, password=password).model_dump()
        return await self._request("POST", ENDPOINTS["login"], json=body, auth=False) or {}

    async def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        body = RegisterRequest(name=name, email=email, password=password).model_dump()
        return await self._request("POST", ENDPOINTS["register"], json=body, auth=False) or {}

    async def get_me(self) -> Dict[str, Any]:
        return await self._request("GET", ENDPOINTS["me"]) or {}

    async def update_me(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        return await self._request("PATCH", ENDPOINTS["users_me"], json=dict(fields)) or {}

    async def delete_me(self) -> None:
        await self._request("DELETE", ENDPOINTS["users_me"])

    @debug_log(log_result=False)
    async def submit_event(self, count: int, timestamp: datetime) -> Dict[str, Any]:
        body = ShakeSubmission(count=count, timestamp=to_iso(timestamp)).model_dump()
        return await self._request("POST", ENDPOINTS["shakes"], json=body) or {}

    async def list_events(
        self,
        date: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        payload = await self._request("GET", ENDPOINTS["shakes"], params={"date": date, "from": start, "to": end})
        return shake_items(payload)

    @debug_log()
    async def count_events(
        self,
        date: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> int:
        payload = await self._request("GET", ENDPOINTS["shakes"], params={"date": date, "from": start, "to": end})
        return parse_shake_list(payload).resolved_count()

    async def list_activities(self, kind: Optional[str] = None, limit: int = 20) -> List[Dict[str, Any]]:
        payload = await self._request("GET", ENDPOINTS["activities"], params={"type": kind, "limit": limit})
        if isinstance(payload, dict):
            payload = payload.get("activities") or payload.get("data") or []
        return [item for item in (payload or []) if isinstance(item, dict)]

    async def log_activity(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        body = ActivityRequest.model_validate(dict(payload)).model_dump()
        return await self._request("POST", ENDPOINTS["activities"], json=body) or {"ok": True}

    async def send_password_reset(self, email: str) -> Dict[str, Any]:
        body = PasswordResetRequest(email=email).model_dump()
        return await self._request("POST", ENDPOINTS["forgot_password"], json=body, auth=False) or {"ok": True}

    async def submit_feedback(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        body = FeedbackRequest.model_validate(dict(payload)).model_dump(exclude_none=True)
        return await self._request("POST", ENDPOINTS["feedbacks"], json=body) or {"ok": True}
