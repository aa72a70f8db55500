"""Serviços do domínio."""

from shakesync.core.services.state_access import SafeStateAccess
from shakesync.core.services.credential_store import CredentialStore
from shakesync.core.services.overlay_cache import ProfileOverlayCache, merge_profile, user_key_for
from shakesync.core.services.quota_window import QuotaWindowTracker, time_until_reset
from shakesync.core.services.fallback_counters import FallbackCounterStore
from shakesync.core.services.reconciliation import ReconciliationEngine, SyncState
from shakesync.core.services.event_recorder import EventRecorder, InFlightGuard
from shakesync.core.services.motion_detector import MotionTriggerDetector
from shakesync.core.services.account_service import AccountService
from shakesync.core.services.activity_feed import ActivityFeed
from shakesync.core.services.shake_session import ShakeSession

__all__ = [
    "SafeStateAccess",
    "CredentialStore",
    "ProfileOverlayCache",
    "merge_profile",
    "user_key_for",
    "QuotaWindowTracker",
    "time_until_reset",
    "FallbackCounterStore",
    "ReconciliationEngine",
    "SyncState",
    "EventRecorder",
    "InFlightGuard",
    "MotionTriggerDetector",
    "AccountService",
    "ActivityFeed",
    "ShakeSession",
]
