"""Detector de shakes a partir do acelerômetro."""

from __future__ import annotations

from typing import Any, Callable, Optional

from shakesync.config.constants import DEFAULTS
from shakesync.core.models import MotionSample


class MotionTriggerDetector:
    """
    Converte amostras de 3 eixos em pulsos de "shake solicitado".

    Dispara quando a variação de magnitude entre duas amostras passa de
    ``threshold``, o último disparo foi há mais de ``debounce_ms`` e o
    portão (``gate``) permite. O detector não guarda estado de cota.
    """

    def __init__(
        self,
        on_trigger: Callable[[], Any],
        gate: Optional[Callable[[], bool]] = None,
        threshold: float = DEFAULTS["motion_threshold"],
        debounce_ms: int = DEFAULTS["motion_debounce_ms"],
    ):
        self._on_trigger = on_trigger
        self._gate = gate or (lambda: True)
        self.threshold = threshold
        self.debounce_ms = debounce_ms
        self._previous: Optional[float] = None
        self._last_fire_ms: Optional[float] = None

    def feed(self, sample: MotionSample) -> bool:
        """Processa uma amostra. Retorna True quando disparou."""
        magnitude = sample.magnitude
        previous, self._previous = self._previous, magnitude
        if previous is None:
            return False

        if abs(magnitude - previous) <= self.threshold:
            return False
        if self._last_fire_ms is not None and sample.timestamp_ms - self._last_fire_ms <= self.debounce_ms:
            return False
        if not self._gate():
            return False

        self._last_fire_ms = sample.timestamp_ms
        self._on_trigger()
        return True

    def reset(self) -> None:
        self._previous = None
        self._last_fire_ms = None
