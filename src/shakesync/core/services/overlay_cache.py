"""
Overlay de perfil gerenciado pelo cliente.

Guarda apenas campos que o cliente controla (``avatarIndex``, ``bio``,
``phone``) por usuário e os aplica por cima do perfil do backend. Campos
autoritativos do servidor (id, email, nome, pontos, datas) nunca são
sobrescritos.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from shakesync.config.constants import PROFILE_OVERLAY_FIELDS, STORAGE_KEYS
from shakesync.core.services.state_access import SafeStateAccess

ALLOWED_FIELDS = PROFILE_OVERLAY_FIELDS

ANONYMOUS_KEY = "anonymous"


def user_key_for(user: Optional[Mapping[str, Any]]) -> str:
    """Chave estável do usuário: id, _id, email ou ``anonymous``."""
    if not user:
        return ANONYMOUS_KEY
    for field in ("id", "_id", "email"):
        value = user.get(field)
        if value not in (None, ""):
            return str(value)
    return ANONYMOUS_KEY


def filter_overlay(fields: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Mantém apenas os campos permitidos no overlay."""
    if not fields:
        return {}
    return {k: v for k, v in fields.items() if k in ALLOWED_FIELDS}


def merge_profile(remote: Optional[Mapping[str, Any]], overlay: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Aplica o overlay sobre o perfil remoto.

    Chaves fora da lista permitida são ignoradas mesmo que estejam no
    overlay, então o restante do perfil remoto passa intacto.
    """
    merged = dict(remote or {})
    merged.update(filter_overlay(overlay))
    return merged


class ProfileOverlayCache:
    """Overlays persistidos, indexados pela chave do usuário."""

    def __init__(self, state: SafeStateAccess):
        self._state = state

    def _load_all(self) -> Dict[str, Dict[str, Any]]:
        stored = self._state.get(STORAGE_KEYS["overlay"], {})
        if not isinstance(stored, dict):
            return {}
        return {k: filter_overlay(v) for k, v in stored.items() if isinstance(v, dict)}

    def _save_all(self, overlays: Dict[str, Dict[str, Any]]) -> None:
        if overlays:
            self._state.set(STORAGE_KEYS["overlay"], overlays)
        else:
            self._state.delete(STORAGE_KEYS["overlay"])

    def get_overlay(self, user_key: str) -> Dict[str, Any]:
        return dict(self._load_all().get(user_key, {}))

    def set_overlay(self, user_key: str, fields: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Substitui o overlay do usuário; resultado vazio remove a entrada."""
        overlays = self._load_all()
        clean = filter_overlay(fields)
        if clean:
            overlays[user_key] = clean
        else:
            overlays.pop(user_key, None)
        self._save_all(overlays)
        return dict(clean)

    def update_overlay(self, user_key: str, partial: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Mescla os campos permitidos de ``partial`` no overlay existente."""
        current = self.get_overlay(user_key)
        current.update(filter_overlay(partial))
        return self.set_overlay(user_key, current)

    def clear(self, user_key: Optional[str] = None) -> None:
        if user_key is None:
            self._save_all({})
            return
        self.set_overlay(user_key, None)

    def adopt(self, from_key: str, to_key: str) -> Dict[str, Any]:
        """
        Move o overlay de ``from_key`` para ``to_key``.

        Usado quando uma edição foi salva antes de o usuário ser identificado.
        Os campos movidos prevalecem sobre os que já existiam no destino.
        """
        pending = self.get_overlay(from_key)
        if not pending or from_key == to_key:
            return self.get_overlay(to_key)
        overlays = self._load_all()
        overlays.pop(from_key, None)
        merged = {**overlays.get(to_key, {}), **pending}
        overlays[to_key] = merged
        self._save_all(overlays)
        return dict(merged)
