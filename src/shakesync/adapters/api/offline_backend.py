"""
Backend em memória para o modo offline e para testes.

Reproduz o contrato do backend real: limite diário, feed de atividades,
perfil com PATCH e contagens por dia. Com um ``SafeStateAccess`` os dados
ficam sob as chaves ``offline.*`` e sobrevivem entre execuções da CLI, então
o limite diário vale também entre processos. As chaves ``reachable`` e
``supports_profile_patch`` simulam rede fora do ar e endpoint ausente.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from shakesync.config.constants import DAILY_LIMIT, OFFLINE_KEY_PREFIX
from shakesync.core.clock import Clock, date_key
from shakesync.core.exceptions import (
    AuthenticationException,
    NetworkException,
    NotSupportedException,
    QuotaExceededException,
)
from shakesync.core.interfaces import BackendGateway
from shakesync.core.services.state_access import SafeStateAccess
from shakesync.core.timestamps import normalize, to_iso

GUEST_EMAIL = "guest@offline.local"

_PERSISTED_FIELDS = {
    "users": dict,
    "passwords": dict,
    "shakes": list,
    "activities": list,
    "feedbacks": list,
    "current_email": str,
}


class OfflineBackend(BackendGateway):
    """Implementação do BackendGateway sem rede."""

    def __init__(
        self,
        clock: Optional[Clock] = None,
        daily_limit: int = DAILY_LIMIT,
        state: Optional[SafeStateAccess] = None,
    ):
        self.clock = clock or Clock()
        self.daily_limit = daily_limit
        self.reachable = True
        self.supports_profile_patch = True
        self.users: Dict[str, Dict[str, Any]] = {}
        self.passwords: Dict[str, str] = {}
        self.tokens: Dict[str, str] = {}
        self.shakes: List[Dict[str, Any]] = []
        self.activities: List[Dict[str, Any]] = []
        self.feedbacks: List[Dict[str, Any]] = []
        self.current_email: Optional[str] = None
        self._state = state
        self._restore()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _restore(self) -> None:
        """Carrega o que foi gravado em execuções anteriores; tipos inválidos são ignorados."""
        if self._state is None:
            return
        for name, expected in _PERSISTED_FIELDS.items():
            stored = self._state.get(OFFLINE_KEY_PREFIX + name)
            if isinstance(stored, expected):
                setattr(self, name, stored)

    def _save(self) -> None:
        """Grava o estado do backend simulado; sem repositório, nada a fazer."""
        if self._state is None:
            return
        for name in _PERSISTED_FIELDS:
            value = getattr(self, name)
            if value is None:
                self._state.delete(OFFLINE_KEY_PREFIX + name)
            else:
                self._state.set(OFFLINE_KEY_PREFIX + name, value)

    def _check_network(self) -> None:
        if not self.reachable:
            raise NetworkException("Backend offline (simulado)")

    def _user(self) -> Dict[str, Any]:
        """Usuário da sessão; sem login, usa o convidado local."""
        if self.current_email is None:
            self.current_email = GUEST_EMAIL
            self.users.setdefault(
                GUEST_EMAIL,
                {"id": "offline-guest", "email": GUEST_EMAIL, "name": "Convidado", "createdAt": to_iso(self.clock.now())},
            )
            self._save()
        if self.current_email not in self.users:
            raise AuthenticationException("Conta inexistente")
        return self.users[self.current_email]

    def _session(self, email: str) -> Dict[str, Any]:
        token = f"offline-{uuid.uuid4().hex}"
        self.tokens[token] = email
        self.current_email = email
        self._save()
        return {"token": token, "user": dict(self.users[email])}

    def _day_of(self, shake: Mapping[str, Any]) -> str:
        moment = normalize(shake["timestamp"])
        return date_key(self.clock.localize(moment))

    def _filtered(self, date: Optional[str], start: Optional[str], end: Optional[str]) -> List[Dict[str, Any]]:
        email = self.current_email
        items = [s for s in self.shakes if s["user"] == email]
        if date:
            items = [s for s in items if self._day_of(s) == date]
        if start:
            items = [s for s in items if self._day_of(s) >= start]
        if end:
            items = [s for s in items if self._day_of(s) <= end]
        return items

    def seed_shakes(self, email: str, day_count: int, total_count: int) -> None:
        """Popula contagens: ``day_count`` hoje e o restante em dias anteriores."""
        now = self.clock.now().astimezone(timezone.utc)
        older = datetime(2000, 1, 1, tzinfo=timezone.utc)
        for i in range(total_count):
            moment = now if i < day_count else older
            self.shakes.append({"_id": uuid.uuid4().hex, "user": email, "count": 1, "timestamp": to_iso(moment)})
        self._save()

    # ------------------------------------------------------------------
    # BackendGateway
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        self._check_network()
        if email not in self.users:
            self.users[email] = {
                "id": f"offline-{len(self.users) + 1}",
                "email": email,
                "name": email.split("@")[0],
                "createdAt": to_iso(self.clock.now()),
            }
            self.passwords[email] = password
        elif self.passwords.get(email) != password:
            raise AuthenticationException("Credenciais inválidas")
        return self._session(email)

    async def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        self._check_network()
        self.users[email] = {
            "id": f"offline-{len(self.users) + 1}",
            "email": email,
            "name": name,
            "createdAt": to_iso(self.clock.now()),
        }
        self.passwords[email] = password
        return self._session(email)

    async def get_me(self) -> Dict[str, Any]:
        self._check_network()
        return {"user": dict(self._user())}

    async def update_me(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        self._check_network()
        if not self.supports_profile_patch:
            raise NotSupportedException("PATCH /api/users/me não disponível", status_code=404)
        user = self._user()
        user.update(fields)
        self._save()
        return {"user": dict(user)}

    async def delete_me(self) -> None:
        self._check_network()
        user = self._user()
        self.users.pop(user["email"], None)
        self.shakes = [s for s in self.shakes if s["user"] != user["email"]]
        self.current_email = None
        self._save()

    async def submit_event(self, count: int, timestamp: datetime) -> Dict[str, Any]:
        self._check_network()
        user = self._user()
        today = date_key(self.clock.localize(timestamp))
        used = sum(s["count"] for s in self._filtered(today, None, None))
        if used + count > self.daily_limit:
            raise QuotaExceededException(limit=self.daily_limit, count=used)
        shake = {"_id": uuid.uuid4().hex, "user": user["email"], "count": count, "timestamp": to_iso(timestamp)}
        self.shakes.append(shake)
        self.activities.append(
            {
                "_id": uuid.uuid4().hex,
                "type": "shake",
                "title": "Shake",
                "description": "Shake registrado",
                "timestamp": shake["timestamp"],
            }
        )
        self._save()
        return {"shake": dict(shake)}

    async def list_events(
        self,
        date: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        self._check_network()
        self._user()
        return [dict(s) for s in self._filtered(date, start, end)]

    async def count_events(
        self,
        date: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> int:
        return sum(s["count"] for s in await self.list_events(date, start, end))

    async def list_activities(self, kind: Optional[str] = None, limit: int = 20) -> List[Dict[str, Any]]:
        self._check_network()
        items = [a for a in self.activities if kind is None or a.get("type") == kind]
        return [dict(a) for a in items[-limit:]]

    async def log_activity(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        self._check_network()
        entry = {"_id": uuid.uuid4().hex, "timestamp": to_iso(self.clock.now()), **dict(payload)}
        self.activities.append(entry)
        self._save()
        return {"ok": True, "activity": dict(entry)}

    async def send_password_reset(self, email: str) -> Dict[str, Any]:
        self._check_network()
        return {"ok": True, "message": f"Instruções enviadas para {email}"}

    async def submit_feedback(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        self._check_network()
        self.feedbacks.append(dict(payload))
        self._save()
        return {"ok": True}
