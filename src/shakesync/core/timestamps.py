"""
Normalização de timestamps heterogêneos.

O backend e caches antigos entregam datas em vários formatos: texto ISO-8601,
epoch em segundos, epoch em milissegundos, números em texto e objetos no
estilo ``{"seconds": ...}``. Tudo passa por ``classify`` uma única vez e sai
como um instante UTC com fuso, ou ``None`` quando não reconhecido. ``None``
significa "excluir", nunca "agora".
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Any, Mapping, Optional

# Abaixo disso o número é interpretado como segundos, acima como milissegundos
EPOCH_MILLIS_THRESHOLD = 1e12

_NUMERIC_TEXT = re.compile(r"^\d+(\.\d+)?$")

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


class TimestampKind(str, Enum):
    EPOCH_SECONDS = "epoch_seconds"
    EPOCH_MILLIS = "epoch_millis"
    ISO_TEXT = "iso_text"
    WRAPPED_SECONDS = "wrapped_seconds"
    INSTANT = "instant"
    INVALID = "invalid"


@dataclass(frozen=True)
class RawTimestamp:
    """Valor bruto já classificado."""

    kind: TimestampKind
    value: Any = None


INVALID = RawTimestamp(TimestampKind.INVALID)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _classify_number(value: float) -> RawTimestamp:
    if not math.isfinite(value):
        return INVALID
    if abs(value) >= EPOCH_MILLIS_THRESHOLD:
        return RawTimestamp(TimestampKind.EPOCH_MILLIS, value)
    return RawTimestamp(TimestampKind.EPOCH_SECONDS, value)


def _wrapped_seconds(raw: Any) -> Optional[float]:
    if isinstance(raw, Mapping):
        seconds = raw.get("seconds")
        nanos = raw.get("nanoseconds", 0)
    else:
        seconds = getattr(raw, "seconds", None)
        nanos = getattr(raw, "nanoseconds", 0)
    if not _is_number(seconds):
        return None
    if not _is_number(nanos):
        nanos = 0
    return seconds + nanos / 1e9


def classify(raw: Any) -> RawTimestamp:
    """Identifica o formato de ``raw`` sem convertê-lo."""
    if raw is None or isinstance(raw, (bool, timedelta)):
        return INVALID
    if isinstance(raw, datetime):
        return RawTimestamp(TimestampKind.INSTANT, raw)
    if isinstance(raw, date):
        return RawTimestamp(TimestampKind.INSTANT, datetime(raw.year, raw.month, raw.day))
    if _is_number(raw):
        return _classify_number(float(raw))
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return INVALID
        if _NUMERIC_TEXT.match(text):
            return _classify_number(float(text))
        return RawTimestamp(TimestampKind.ISO_TEXT, text)

    seconds = _wrapped_seconds(raw)
    if seconds is not None and math.isfinite(seconds):
        return RawTimestamp(TimestampKind.WRAPPED_SECONDS, seconds)
    return INVALID


def _parse_iso(text: str) -> Optional[datetime]:
    # fromisoformat só aceita o sufixo "Z" a partir do Python 3.11
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _to_utc(moment: datetime, local_tz: Optional[tzinfo]) -> datetime:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=local_tz) if local_tz else moment.astimezone()
    return moment.astimezone(timezone.utc)


def normalize(raw: Any, local_tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Converte ``raw`` em um instante UTC com fuso.

    Args:
        raw: Valor em qualquer formato suportado.
        local_tz: Fuso usado para textos/datetimes sem offset (padrão: fuso do sistema).

    Returns:
        datetime em UTC, ou None para formatos inválidos ou fora do intervalo.
    """
    parsed = classify(raw)
    try:
        if parsed.kind in (TimestampKind.EPOCH_SECONDS, TimestampKind.WRAPPED_SECONDS):
            return datetime.fromtimestamp(parsed.value, tz=timezone.utc)
        if parsed.kind is TimestampKind.EPOCH_MILLIS:
            return datetime.fromtimestamp(parsed.value / 1000, tz=timezone.utc)
        if parsed.kind is TimestampKind.ISO_TEXT:
            moment = _parse_iso(parsed.value)
            return _to_utc(moment, local_tz) if moment else None
        if parsed.kind is TimestampKind.INSTANT:
            return _to_utc(parsed.value, local_tz)
    except (OverflowError, OSError, ValueError):
        return None
    return None


def to_iso(moment: datetime) -> str:
    """Texto ISO-8601 em UTC com sufixo Z e milissegundos."""
    utc = _to_utc(moment, None)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def _clock_time(moment: datetime) -> str:
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour:02d}:{moment.minute:02d} {suffix}"


def format_display_time(instant: datetime, now: datetime) -> str:
    """
    Rótulo de exibição relativo a ``now``.

    Mesmo dia local -> "Today, 10:30 AM"; dia anterior -> "Yesterday, 09:05 PM";
    demais -> "Jan 15, 10:30 AM". O fuso de ``now`` define o dia local.
    """
    local = instant.astimezone(now.tzinfo) if now.tzinfo else instant.astimezone()
    today = now.date()
    if local.date() == today:
        prefix = "Today"
    elif local.date() == today - timedelta(days=1):
        prefix = "Yesterday"
    else:
        prefix = f"{_MONTHS[local.month - 1]} {local.day}"
    return f"{prefix}, {_clock_time(local)}"


__all__ = [
    "TimestampKind",
    "RawTimestamp",
    "classify",
    "normalize",
    "to_iso",
    "format_display_time",
]
