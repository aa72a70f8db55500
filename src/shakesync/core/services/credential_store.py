"""Armazenamento do token de autenticação e da identidade da sessão."""

from __future__ import annotations

from typing import Any, Dict, Optional

from shakesync.config.constants import STORAGE_KEYS
from shakesync.core.services.state_access import SafeStateAccess


class CredentialStore:
    """
    Guarda o bearer token em memória e no armazenamento persistente.

    O token é opaco: a expiração só é descoberta quando o backend
    responde com erro de autorização.
    """

    def __init__(self, state: SafeStateAccess, logger: Optional[Any] = None):
        self._state = state
        self.logger = logger or state.logger
        self._token: Optional[str] = None
        self._loaded = False

    def get_token(self) -> Optional[str]:
        if not self._loaded:
            stored = self._state.get(STORAGE_KEYS["token"])
            self._token = stored if isinstance(stored, str) and stored else None
            self._loaded = True
        return self._token

    def set_token(self, token: Optional[str]) -> None:
        """Define o token; ``None`` limpa também o valor persistido."""
        self._token = token or None
        self._loaded = True
        if self._token:
            self._state.set(STORAGE_KEYS["token"], self._token)
        else:
            self._state.delete(STORAGE_KEYS["token"])
            self.logger.debug("Token removido")

    def get_user_key(self) -> Optional[str]:
        """Chave do último usuário identificado nesta sessão."""
        stored = self._state.get(STORAGE_KEYS["user_key"])
        return stored if isinstance(stored, str) and stored else None

    def set_user_key(self, user_key: Optional[str]) -> None:
        if user_key:
            self._state.set(STORAGE_KEYS["user_key"], user_key)
        else:
            self._state.delete(STORAGE_KEYS["user_key"])

    def clear(self) -> None:
        """Remove token e identidade da sessão."""
        self.set_token(None)
        self.set_user_key(None)

    @property
    def has_token(self) -> bool:
        return self.get_token() is not None

    def auth_headers(self) -> Dict[str, str]:
        """Cabeçalho Authorization, vazio quando não há token."""
        token = self.get_token()
        return {"Authorization": f"Bearer {token}"} if token else {}
