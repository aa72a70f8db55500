"""Sistema centralizado de exceções customizadas do ShakeSync."""

from __future__ import annotations
from typing import Any, Optional


class ShakeSyncBaseException(Exception):
    """Exceção base para todas as exceções customizadas do ShakeSync."""

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        base = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            base = f"{base} ({details_str})"
        if self.cause:
            base = f"{base} | Causa: {self.cause}"
        return base

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# ==================== Exceções de Rede ====================

class NetworkException(ShakeSyncBaseException):
    """Backend inalcançável (conexão recusada, DNS, sem rede)."""
    pass


class RequestTimeoutException(NetworkException):
    """Requisição excedeu o tempo limite."""
    pass


# ==================== Exceções de Autenticação ====================

class AuthenticationException(ShakeSyncBaseException):
    """Token ausente, expirado ou rejeitado (401/403)."""
    pass


class AccountDisabledException(AuthenticationException):
    """Conta desativada pelo backend."""
    pass


# ==================== Exceções de Cota ====================

class QuotaExceededException(ShakeSyncBaseException):
    """Limite diário de eventos atingido."""

    def __init__(
        self,
        message: str = "Limite diário de shakes atingido",
        *,
        limit: Optional[int] = None,
        count: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        self.limit = limit
        self.count = count
        self.remaining = max(0, limit - count) if limit is not None and count is not None else None
        merged = {"limit": limit, "count": count}
        merged.update(details or {})
        super().__init__(
            message,
            details={k: v for k, v in merged.items() if v is not None},
            cause=cause,
        )


# ==================== Exceções de API ====================

class APIException(ShakeSyncBaseException):
    """Falha genérica do backend, repassada como veio."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        self.status_code = status_code
        merged = dict(details or {})
        if status_code is not None:
            merged.setdefault("status_code", status_code)
        super().__init__(message, details=merged, cause=cause)


class NotSupportedException(APIException):
    """Endpoint inexistente no backend (404)."""
    pass


class InvalidAPIResponseException(APIException):
    """Resposta de API inválida ou inesperada."""
    pass


# ==================== Exceções de Armazenamento ====================

class StorageException(ShakeSyncBaseException):
    """Falha de leitura ou escrita no armazenamento local."""
    pass


# ==================== Exceções de Configuração ====================

class ConfigurationException(ShakeSyncBaseException):
    """Exceção base para erros de configuração."""
    pass


# ==================== Exceções de Validação ====================

class ValidationException(ShakeSyncBaseException):
    """Exceção base para erros de validação."""
    pass


# ==================== Helpers ====================

def wrap_exception(exc: Exception, wrapper_class: type[ShakeSyncBaseException], message: str, **details: Any) -> ShakeSyncBaseException:
    """
    Envolve uma exceção existente em uma exceção customizada.

    Args:
        exc: Exceção original
        wrapper_class: Classe da exceção customizada
        message: Mensagem descritiva
        **details: Detalhes adicionais

    Returns:
        Instância da exceção customizada
    """
    return wrapper_class(message, details=details, cause=exc)


def is_fallback_error(exc: BaseException) -> bool:
    """Indica se a falha permite seguir pelo caminho offline."""
    return isinstance(exc, (NetworkException, NotSupportedException))


__all__ = [
    "ShakeSyncBaseException",
    "NetworkException",
    "RequestTimeoutException",
    "AuthenticationException",
    "AccountDisabledException",
    "QuotaExceededException",
    "APIException",
    "NotSupportedException",
    "InvalidAPIResponseException",
    "StorageException",
    "ConfigurationException",
    "ValidationException",
    "wrap_exception",
    "is_fallback_error",
]
