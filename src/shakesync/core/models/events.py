"""Modelos de eventos (shakes), atividades e amostras de movimento."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from shakesync.core.models.quota import CounterSource


@dataclass(frozen=True)
class EventRecord:
    """
    Um shake aceito, pelo backend ou simulado localmente enquanto offline.

    Attributes:
        id: Identificador do backend ou ``local-...``
        timestamp: Instante do registro (UTC)
        count: Quantidade contabilizada (normalmente 1)
        source: BACKEND ou LOCAL
        reward_payload: Recompensa devolvida pelo backend, se houver
    """

    id: str
    timestamp: datetime
    count: int = 1
    source: CounterSource = CounterSource.BACKEND
    reward_payload: Optional[Dict[str, Any]] = None

    @property
    def is_local(self) -> bool:
        return self.source is CounterSource.LOCAL


@dataclass(frozen=True)
class Activity:
    """Item do feed de atividades já normalizado."""

    id: str
    kind: str
    timestamp: datetime
    title: str = ""
    description: str = ""
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class MotionSample:
    """Leitura do acelerômetro em g com carimbo de tempo em milissegundos."""

    x: float
    y: float
    z: float
    timestamp_ms: float

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)
