"""Contadores locais usados como fonte de verdade enquanto offline."""

from __future__ import annotations

from shakesync.config.constants import STORAGE_KEYS
from shakesync.core.models import FallbackCounters
from shakesync.core.services.state_access import SafeStateAccess


class FallbackCounterStore:
    """
    Persistência dos contadores diário e total.

    O contador diário só vale para ``daily_date``; lido em outro dia, vale 0.
    Valores armazenados inválidos são lidos como 0.
    """

    def __init__(self, state: SafeStateAccess):
        self._state = state

    def load(self, today: str) -> FallbackCounters:
        stored_date = self._state.get(STORAGE_KEYS["fallback_date"])
        daily = self._state.get_int(STORAGE_KEYS["fallback_daily"])
        total = self._state.get_int(STORAGE_KEYS["fallback_total"])
        if stored_date != today:
            daily = 0
        return FallbackCounters(daily_count=daily, daily_date=today, total_count=total)

    def _save(self, counters: FallbackCounters) -> FallbackCounters:
        self._state.set(STORAGE_KEYS["fallback_daily"], counters.daily_count)
        self._state.set(STORAGE_KEYS["fallback_date"], counters.daily_date)
        self._state.set(STORAGE_KEYS["fallback_total"], counters.total_count)
        return counters

    def increment(self, today: str, by: int = 1) -> FallbackCounters:
        current = self.load(today)
        return self._save(
            FallbackCounters(
                daily_count=current.daily_count + by,
                daily_date=today,
                total_count=current.total_count + by,
            )
        )

    def overwrite(self, today: str, daily: int, total: int | None = None) -> FallbackCounters:
        """Grava os números do backend, descartando os locais."""
        current = self.load(today)
        return self._save(
            FallbackCounters(
                daily_count=max(0, daily),
                daily_date=today,
                total_count=current.total_count if total is None else max(0, total),
            )
        )
