"""
Acesso tolerante ao repositório de estado.

Falhas de armazenamento nunca interrompem um fluxo: leituras com erro
devolvem o padrão e escritas com erro são apenas registradas.
"""

from __future__ import annotations

from typing import Any, Optional

from shakesync.core.exceptions import StorageException
from shakesync.core.interfaces import StateRepository
from shakesync.infrastructure.logging import get_logger


class SafeStateAccess:
    """Envolve um StateRepository engolindo StorageException."""

    def __init__(self, repository: StateRepository, logger: Optional[Any] = None):
        self.repository = repository
        self.logger = logger or get_logger()

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self.repository.get(key, default)
        except StorageException as e:
            self.logger.aviso("Falha ao ler estado local", chave=key, erro=str(e))
            return default

    def get_int(self, key: str, default: int = 0) -> int:
        """Lê um inteiro não negativo; valores inválidos viram ``default``."""
        value = self.get(key, default)
        if isinstance(value, bool):
            return default
        try:
            number = int(value)
        except (TypeError, ValueError):
            return default
        return number if number >= 0 else default

    def set(self, key: str, value: Any) -> bool:
        try:
            self.repository.set(key, value)
            return True
        except StorageException as e:
            self.logger.aviso("Falha ao gravar estado local", chave=key, erro=str(e))
            return False

    def delete(self, key: str) -> bool:
        try:
            self.repository.delete(key)
            return True
        except StorageException as e:
            self.logger.aviso("Falha ao remover estado local", chave=key, erro=str(e))
            return False
