"""
Janela de cota diária.

A contagem pertence a um único dia local. Qualquer leitura que observe
um dia diferente do armazenado zera a janela antes de responder, e a
virada é idempotente: repetir no mesmo dia não altera nada.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from shakesync.config.constants import DAILY_LIMIT, STORAGE_KEYS
from shakesync.core.clock import Clock
from shakesync.core.models import QuotaWindow, ResetCountdown
from shakesync.core.services.state_access import SafeStateAccess


def time_until_reset(now: datetime, clock: Optional[Clock] = None) -> ResetCountdown:
    """Horas e minutos entre ``now`` e a próxima meia-noite local."""
    seconds = (clock or Clock()).seconds_until_midnight(now)
    return ResetCountdown(hours=seconds // 3600, minutes=(seconds % 3600) // 60)


class QuotaWindowTracker:
    """Contagem do dia corrente com limite fixo."""

    def __init__(
        self,
        state: SafeStateAccess,
        clock: Clock,
        limit: int = DAILY_LIMIT,
        logger: Optional[Any] = None,
    ):
        self._state = state
        self._clock = clock
        self.limit = limit
        self.logger = logger or state.logger

        stored_key = self._state.get(STORAGE_KEYS["quota_date"])
        self._date_key: str = stored_key if isinstance(stored_key, str) else ""
        self._count: int = self._state.get_int(STORAGE_KEYS["quota_count"])

    def _persist(self) -> None:
        self._state.set(STORAGE_KEYS["quota_date"], self._date_key)
        self._state.set(STORAGE_KEYS["quota_count"], self._count)

    def ensure_current(self) -> bool:
        """Vira a janela se o dia mudou. Retorna True quando houve virada."""
        today = self._clock.today_key()
        if self._date_key == today:
            return False
        previous = self._date_key
        self._date_key = today
        self._count = 0
        self._persist()
        self.logger.info("Nova janela diária", anterior=previous or None, atual=today)
        return True

    def snapshot(self) -> QuotaWindow:
        self.ensure_current()
        return QuotaWindow(date_key=self._date_key, count=self._count, limit=self.limit)

    @property
    def count(self) -> int:
        return self.snapshot().count

    @property
    def exhausted(self) -> bool:
        """Checagem em memória, sem rede, usada pelo detector de movimento."""
        if self._date_key != self._clock.today_key():
            return False
        return self._count >= self.limit

    def can_record(self) -> bool:
        return not self.snapshot().exhausted

    def increment(self, by: int = 1) -> QuotaWindow:
        """Incremento otimista (fallback offline ou re-sync indisponível)."""
        self.ensure_current()
        self._count += by
        self._persist()
        return self.snapshot()

    def set_count(self, count: int, day: Optional[str] = None) -> QuotaWindow:
        """Substitui a contagem pelo valor autoritativo do backend."""
        self.ensure_current()
        if day is not None and day != self._date_key:
            return self.snapshot()
        self._count = max(0, int(count))
        self._persist()
        return self.snapshot()

    def time_until_reset(self, now: Optional[datetime] = None) -> ResetCountdown:
        return time_until_reset(now or self._clock.now(), self._clock)

    def __repr__(self) -> str:
        return f"QuotaWindowTracker(date_key={self._date_key!r}, count={self._count}, limit={self.limit})"


__all__ = ["QuotaWindowTracker", "time_until_reset"]
