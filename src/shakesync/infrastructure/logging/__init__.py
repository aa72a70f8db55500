"""
Sistema de logging do ShakeSync.

Use ``get_logger()`` para obter o logger global e ``configurar_logging``
para aplicar a configuração carregada de ``config.yaml``/ambiente.
"""

from typing import Optional

from shakesync.config.models import LoggerConfig
from .logger import ShakeLogger, config_from_env
from .debug_decorator import debug_log

# Singleton do logger principal
_logger_instance: Optional[ShakeLogger] = None


def get_logger() -> ShakeLogger:
    """Retorna a instância singleton do logger."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = ShakeLogger(config_from_env())
    return _logger_instance


def configurar_logging(config: Optional[LoggerConfig] = None) -> ShakeLogger:
    """Aplica ``config`` (mais overrides de ambiente) ao logger global."""
    logger = get_logger()
    logger.configure(config_from_env(config))
    return logger


__all__ = [
    "LoggerConfig",
    "ShakeLogger",
    "get_logger",
    "configurar_logging",
    "debug_log",
]
