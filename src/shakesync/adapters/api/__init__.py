from shakesync.adapters.api.base_api import BaseAPIClient
from shakesync.adapters.api.backend_api import BackendAPI, parse_shake_list
from shakesync.adapters.api.offline_backend import GUEST_EMAIL, OfflineBackend

__all__ = ["BaseAPIClient", "BackendAPI", "GUEST_EMAIL", "OfflineBackend", "parse_shake_list"]
