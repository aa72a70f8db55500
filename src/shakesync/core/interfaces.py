"""
Interfaces do Núcleo (Core Interfaces).

Define os contratos (Ports) que os Adapters devem implementar.
Os serviços dependem apenas destes contratos, nunca de requests ou disco.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional


class StateRepository(ABC):
    """
    Armazenamento chave/valor do estado local (token, overlay, contadores).
    Falhas de IO devem ser reportadas como StorageException.
    """

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Recupera um valor ou ``default`` quando ausente."""
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Persiste um valor serializável em JSON."""
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a chave (sem erro se ausente)."""
        ...

    @abstractmethod
    def keys(self) -> Iterable[str]:
        ...


class BackendGateway(ABC):
    """
    Contrato do backend autoritativo.

    Erros seguem a taxonomia de ``shakesync.core.exceptions``:
    NetworkException para conectividade, NotSupportedException para
    endpoints ausentes, QuotaExceededException para cota esgotada,
    AuthenticationException para 401/403 e APIException para o resto.
    """

    @abstractmethod
    async def login(self, email: str, password: str) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def get_me(self) -> Dict[str, Any]:
        """Perfil autoritativo do usuário autenticado."""
        ...

    @abstractmethod
    async def update_me(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def delete_me(self) -> None:
        ...

    @abstractmethod
    async def submit_event(self, count: int, timestamp: datetime) -> Dict[str, Any]:
        """Registra um shake. Levanta QuotaExceededException quando esgotado."""
        ...

    @abstractmethod
    async def count_events(
        self,
        date: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> int:
        """Contagem autoritativa do dia ``date`` (YYYY-MM-DD) ou total quando None."""
        ...

    @abstractmethod
    async def list_events(
        self,
        date: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    async def list_activities(self, kind: Optional[str] = None, limit: int = 20) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    async def log_activity(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def send_password_reset(self, email: str) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def submit_feedback(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        ...
