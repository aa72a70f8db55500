"""
Fachada usada pelas telas: foco, contadores, shakes e contagem regressiva.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional, Set

from shakesync.config.constants import DEFAULTS
from shakesync.core.exceptions import QuotaExceededException, ShakeSyncBaseException
from shakesync.core.models import CounterSnapshot, EventRecord, MotionSample, ResetCountdown
from shakesync.core.services.event_recorder import EventRecorder
from shakesync.core.services.motion_detector import MotionTriggerDetector
from shakesync.core.services.quota_window import QuotaWindowTracker
from shakesync.core.services.reconciliation import ReconciliationEngine
from shakesync.infrastructure.logging import get_logger


class ShakeSession:
    """Conecta detector, gravador, cota e reconciliação para uma sessão."""

    def __init__(
        self,
        recorder: EventRecorder,
        quota: QuotaWindowTracker,
        reconciler: ReconciliationEngine,
        threshold: float,
        debounce_ms: int,
        tick_interval: float = DEFAULTS["refresh_interval"],
        logger: Optional[Any] = None,
    ):
        self._recorder = recorder
        self._quota = quota
        self._reconciler = reconciler
        self.tick_interval = tick_interval
        self.logger = logger or get_logger()
        self._pending: Set[asyncio.Task] = set()
        self.detector = MotionTriggerDetector(
            on_trigger=self._schedule_record,
            gate=recorder.can_fire,
            threshold=threshold,
            debounce_ms=debounce_ms,
        )

    async def on_focus(self) -> CounterSnapshot:
        """Tela ganhou foco ou app voltou ao primeiro plano: vira o dia e sincroniza."""
        self._quota.ensure_current()
        return await self._reconciler.refresh()

    on_foreground = on_focus

    def counters(self) -> CounterSnapshot:
        return self._reconciler.local_snapshot()

    def tick(self) -> ResetCountdown:
        """Atualização periódica da contagem regressiva, sem tocar na cota."""
        return self._quota.time_until_reset()

    async def watch(self, ticks: int, on_tick: Callable[[ResetCountdown], None]) -> None:
        """Entrega ``ticks`` contagens regressivas, uma a cada ``tick_interval`` segundos."""
        for i in range(ticks):
            if i:
                await asyncio.sleep(self.tick_interval)
            on_tick(self.tick())

    async def shake(self) -> Optional[EventRecord]:
        return await self._recorder.record_event()

    def feed_motion(self, sample: MotionSample) -> bool:
        return self.detector.feed(sample)

    async def drain(self) -> None:
        """Aguarda os envios disparados pelo detector."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _schedule_record(self) -> None:
        task = asyncio.get_running_loop().create_task(self._recorder.record_event())
        self._pending.add(task)
        task.add_done_callback(self._on_record_done)

    def _on_record_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if isinstance(error, QuotaExceededException):
            self.logger.aviso("Limite diário atingido", limite=error.limit)
        elif isinstance(error, ShakeSyncBaseException):
            self.logger.erro("Falha ao registrar shake", erro=str(error))
        elif error is not None:
            self.logger.critico("Erro inesperado ao registrar shake", erro=repr(error))
