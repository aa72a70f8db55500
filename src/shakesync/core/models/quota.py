"""Modelos da janela de cota e dos contadores locais."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CounterSource(str, Enum):
    """Origem dos números exibidos."""

    BACKEND = "backend"
    LOCAL = "local"


@dataclass(frozen=True)
class QuotaWindow:
    """
    Contagem de shakes atribuída a um único dia local.

    Attributes:
        date_key: Dia local (YYYY-MM-DD) ao qual ``count`` pertence
        count: Shakes registrados no dia
        limit: Limite diário
    """

    date_key: str
    count: int
    limit: int

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.count)

    @property
    def exhausted(self) -> bool:
        return self.count >= self.limit


@dataclass(frozen=True)
class FallbackCounters:
    """Contadores persistidos localmente, usados enquanto o backend está fora."""

    daily_count: int
    daily_date: str
    total_count: int


@dataclass(frozen=True)
class CounterSnapshot:
    """Números prontos para exibição."""

    daily: int
    total: int
    limit: int
    source: CounterSource
    date_key: str

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.daily)

    @property
    def synced(self) -> bool:
        return self.source is CounterSource.BACKEND


@dataclass(frozen=True)
class ResetCountdown:
    """Tempo restante até a próxima meia-noite local."""

    hours: int
    minutes: int

    def __str__(self) -> str:
        return f"{self.hours}h {self.minutes}m"
