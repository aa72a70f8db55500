"""
Relógio injetável.

A virada do dia acontece à meia-noite local do dispositivo, ou no fuso
IANA configurado em ``quota.timezone``.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo


def date_key(moment: datetime | date) -> str:
    """Chave de dia no formato YYYY-MM-DD."""
    return moment.strftime("%Y-%m-%d")


def next_midnight(moment: datetime) -> datetime:
    """Próxima meia-noite no mesmo fuso de ``moment``."""
    return datetime.combine(moment.date() + timedelta(days=1), time(0), tzinfo=moment.tzinfo)


class Clock:
    """Fonte de tempo da aplicação."""

    def __init__(self, timezone_name: Optional[str] = None):
        self._tz: Optional[tzinfo] = ZoneInfo(timezone_name) if timezone_name else None

    @property
    def tzinfo(self) -> Optional[tzinfo]:
        """Fuso configurado ou None para o fuso local do sistema."""
        return self._tz

    def now(self) -> datetime:
        """Instante atual, sempre com fuso."""
        if self._tz is not None:
            return datetime.now(self._tz)
        return datetime.now().astimezone()

    def localize(self, moment: datetime) -> datetime:
        """Converte um instante para o fuso do relógio."""
        if moment.tzinfo is None:
            moment = moment.astimezone()
        if self._tz is not None:
            return moment.astimezone(self._tz)
        return moment.astimezone()

    def today_key(self) -> str:
        return date_key(self.now())

    def seconds_until_midnight(self, now: Optional[datetime] = None) -> int:
        current = now or self.now()
        delta = next_midnight(current).astimezone(timezone.utc) - current.astimezone(timezone.utc)
        return max(0, int(delta.total_seconds()))
