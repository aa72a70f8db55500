"""
Reconciliação entre contadores locais e o backend.

Sempre que uma leitura autoritativa funciona, o backend vence: os números
dele substituem os contadores locais e a janela de cota. Os valores locais
nunca são somados aos remotos.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from shakesync.core.clock import Clock
from shakesync.core.exceptions import (
    APIException,
    AuthenticationException,
    NetworkException,
    QuotaExceededException,
)
from shakesync.core.interfaces import BackendGateway
from shakesync.core.models import CounterSnapshot, CounterSource
from shakesync.core.services.fallback_counters import FallbackCounterStore
from shakesync.core.services.quota_window import QuotaWindowTracker
from shakesync.infrastructure.logging import debug_log, get_logger


class SyncState(str, Enum):
    UNKNOWN = "unknown"
    LOCAL_ONLY = "local_only"
    SYNCED = "synced"


class ReconciliationEngine:
    """Decide quais números exibir e mantém o estado local alinhado ao backend."""

    def __init__(
        self,
        backend: BackendGateway,
        quota: QuotaWindowTracker,
        fallback: FallbackCounterStore,
        clock: Clock,
        logger: Optional[Any] = None,
    ):
        self._backend = backend
        self._quota = quota
        self._fallback = fallback
        self._clock = clock
        self.logger = logger or get_logger()
        self._state = SyncState.UNKNOWN

    @property
    def state(self) -> SyncState:
        return self._state

    def local_snapshot(self) -> CounterSnapshot:
        """Números locais: janela de cota para o dia, contador local para o total."""
        window = self._quota.snapshot()
        counters = self._fallback.load(window.date_key)
        return CounterSnapshot(
            daily=max(window.count, counters.daily_count),
            total=counters.total_count,
            limit=window.limit,
            source=CounterSource.LOCAL,
            date_key=window.date_key,
        )

    @debug_log(log_result=True)
    async def refresh(self) -> CounterSnapshot:
        """
        Busca contagens diária e total no backend e aplica localmente.

        Em falha de rede, erro do backend ou leitura limitada (429), passa a
        LOCAL_ONLY e devolve os números locais. Falhas de autenticação
        também mudam o estado, mas são propagadas.
        """
        self._quota.ensure_current()
        today = self._clock.today_key()
        try:
            daily = await self._backend.count_events(date=today)
            total = await self._backend.count_events()
        except AuthenticationException:
            self._state = SyncState.LOCAL_ONLY
            raise
        except (NetworkException, APIException, QuotaExceededException) as e:
            self._state = SyncState.LOCAL_ONLY
            self.logger.aviso("Backend indisponível, exibindo contadores locais", erro=type(e).__name__)
            return self.local_snapshot()

        self._fallback.overwrite(today, daily, total)
        window = self._quota.set_count(daily, day=today)
        self._state = SyncState.SYNCED
        self.logger.debug("Contadores sincronizados", diario=daily, total=total)
        return CounterSnapshot(
            daily=daily,
            total=total,
            limit=window.limit,
            source=CounterSource.BACKEND,
            date_key=today,
        )

    def accept_daily(self, daily: int) -> None:
        """Aplica a contagem diária obtida na pré-checagem do envio."""
        today = self._clock.today_key()
        self._fallback.overwrite(today, daily)
        self._quota.set_count(daily, day=today)
        self._state = SyncState.SYNCED

    def mark_local_only(self) -> None:
        self._state = SyncState.LOCAL_ONLY
