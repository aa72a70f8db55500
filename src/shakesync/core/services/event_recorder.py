"""
Registro de shakes com cota diária e fallback offline.

Fluxo de ``record_event``:

1. Se já existe um envio em andamento, a chamada é ignorada (None).
2. Cota local esgotada: QuotaExceededException sem tocar a rede.
3. Pré-checagem da contagem do dia no backend (melhor esforço).
4. Envio com tempo limite. Sucesso registra o evento e re-sincroniza;
   cota recusada pelo backend re-sincroniza e propaga; falha de rede
   (incluindo timeout) incrementa os contadores locais e devolve um
   evento local; qualquer outro erro propaga sem alterar contadores.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Any, Dict, List, Mapping, Optional, Tuple

from shakesync.config.constants import DEFAULTS
from shakesync.core.clock import Clock
from shakesync.core.exceptions import (
    APIException,
    NetworkException,
    QuotaExceededException,
    RequestTimeoutException,
    ShakeSyncBaseException,
)
from shakesync.core.interfaces import BackendGateway
from shakesync.core.models import CounterSource, EventRecord
from shakesync.core.services.fallback_counters import FallbackCounterStore
from shakesync.core.services.quota_window import QuotaWindowTracker
from shakesync.core.services.reconciliation import ReconciliationEngine
from shakesync.core.timestamps import normalize
from shakesync.infrastructure.logging import debug_log, get_logger


class InFlightGuard:
    """Trava de vaga única para o envio de shakes."""

    def __init__(self):
        self._held = False

    @property
    def in_flight(self) -> bool:
        return self._held

    def try_acquire(self) -> bool:
        """Ocupa a vaga sem bloquear. False se já ocupada."""
        if self._held:
            return False
        self._held = True
        return True

    def release(self) -> None:
        self._held = False


class EventRecorder:
    """Envia shakes ao backend respeitando a cota e o modo offline."""

    def __init__(
        self,
        backend: BackendGateway,
        quota: QuotaWindowTracker,
        fallback: FallbackCounterStore,
        reconciler: ReconciliationEngine,
        clock: Clock,
        submit_timeout: float = DEFAULTS["submit_timeout"],
        logger: Optional[Any] = None,
    ):
        self._backend = backend
        self._quota = quota
        self._fallback = fallback
        self._reconciler = reconciler
        self._clock = clock
        self._submit_timeout = submit_timeout
        self._guard = InFlightGuard()
        self._history: List[EventRecord] = []
        self.logger = logger or get_logger()

    @property
    def in_flight(self) -> bool:
        return self._guard.in_flight

    @property
    def history(self) -> Tuple[EventRecord, ...]:
        """Eventos registrados nesta sessão, do mais antigo ao mais novo."""
        return tuple(self._history)

    def can_fire(self) -> bool:
        """Portão em memória usado pelo detector de movimento."""
        return not self._guard.in_flight and not self._quota.exhausted

    @debug_log(log_result=False)
    async def record_event(self) -> Optional[EventRecord]:
        if not self._guard.try_acquire():
            self.logger.debug("Envio em andamento, shake ignorado")
            return None
        try:
            return await self._record()
        finally:
            self._guard.release()

    async def _record(self) -> EventRecord:
        window = self._quota.snapshot()
        if window.exhausted:
            raise QuotaExceededException(limit=window.limit, count=window.count)

        await self._precheck()

        now = self._clock.now()
        try:
            payload = await asyncio.wait_for(
                self._backend.submit_event(count=1, timestamp=now),
                timeout=self._submit_timeout,
            )
        except asyncio.TimeoutError as e:
            timeout = RequestTimeoutException(
                "Envio do shake excedeu o tempo limite",
                details={"timeout": self._submit_timeout},
                cause=e,
            )
            return self._record_locally(now, timeout)
        except QuotaExceededException as e:
            synced_error = await self._resync_after_quota(e)
            raise synced_error from e
        except NetworkException as e:
            return self._record_locally(now, e)

        record = self._record_from_payload(payload, now)
        self._history.append(record)
        await self._resync_after_success()
        self.logger.sucesso("Shake registrado", id=record.id, restantes=self._quota.snapshot().remaining)
        return record

    async def _precheck(self) -> None:
        """Confere a contagem autoritativa do dia antes do envio."""
        window = self._quota.snapshot()
        try:
            daily = await self._backend.count_events(date=window.date_key)
        except (NetworkException, APIException, QuotaExceededException) as e:
            self.logger.debug("Pré-checagem indisponível, seguindo com o envio", erro=type(e).__name__)
            return

        self._reconciler.accept_daily(daily)
        if daily >= window.limit:
            raise QuotaExceededException(limit=window.limit, count=daily)

    async def _resync_after_quota(self, error: QuotaExceededException) -> QuotaExceededException:
        limit = self._quota.limit
        if error.count is not None:
            self._reconciler.accept_daily(error.count)
        else:
            try:
                snapshot = await self._reconciler.refresh()
            except ShakeSyncBaseException:
                snapshot = None
            if snapshot is None or not snapshot.synced:
                self._quota.set_count(max(self._quota.count, limit))
        self.logger.aviso("Backend recusou o shake: limite diário atingido", limite=limit)
        return QuotaExceededException(
            error.message,
            limit=error.limit if error.limit is not None else limit,
            count=self._quota.count,
        )

    async def _resync_after_success(self) -> None:
        try:
            snapshot = await self._reconciler.refresh()
        except ShakeSyncBaseException as e:
            self.logger.aviso("Re-sincronização falhou após o envio", erro=type(e).__name__)
            snapshot = None
        if snapshot is None or not snapshot.synced:
            self._increment_locally()

    def _increment_locally(self) -> None:
        window = self._quota.increment()
        self._fallback.increment(window.date_key)

    def _record_locally(self, now, error: NetworkException) -> EventRecord:
        self._increment_locally()
        self._reconciler.mark_local_only()
        record = EventRecord(
            id=f"local-{uuid.uuid4().hex[:12]}",
            timestamp=now,
            count=1,
            source=CounterSource.LOCAL,
        )
        self._history.append(record)
        self.logger.aviso("Backend inalcançável, shake contabilizado localmente", erro=str(error))
        return record

    def _record_from_payload(self, payload: Optional[Mapping[str, Any]], now) -> EventRecord:
        data: Dict[str, Any] = dict(payload or {})
        for wrapper in ("shake", "data"):
            if isinstance(data.get(wrapper), dict):
                data = {**data, **data[wrapper]}
        raw_id = data.get("_id") or data.get("id")
        timestamp = normalize(data.get("timestamp") or data.get("createdAt")) or now
        reward = data.get("reward") or data.get("rewardPayload")
        count = data.get("count", 1)
        return EventRecord(
            id=str(raw_id) if raw_id else f"srv-{uuid.uuid4().hex[:12]}",
            timestamp=timestamp,
            count=count if isinstance(count, int) and not isinstance(count, bool) else 1,
            source=CounterSource.BACKEND,
            reward_payload=reward if isinstance(reward, dict) else None,
        )
