"""Modelos de domínio."""

from shakesync.core.models.quota import (
    CounterSnapshot,
    CounterSource,
    FallbackCounters,
    QuotaWindow,
    ResetCountdown,
)
from shakesync.core.models.events import Activity, EventRecord, MotionSample
from shakesync.core.models.profile import ProfileUpdateResult

__all__ = [
    "CounterSnapshot",
    "CounterSource",
    "FallbackCounters",
    "QuotaWindow",
    "ResetCountdown",
    "Activity",
    "EventRecord",
    "MotionSample",
    "ProfileUpdateResult",
]
