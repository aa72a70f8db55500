"""
Módulo de Configuração do ShakeSync.

Este pacote centraliza toda a lógica de configuração do sistema.
Use `get_config()` para obter a instância global da configuração.
"""

from typing import Optional

from shakesync.config.models import (
    AppConfig,
    BackendConfig,
    QuotaConfig,
    MotionConfig,
    StorageConfig,
    LoggerConfig,
)
from shakesync.config.loader import ConfigLoader, ConfigLoaderException
from shakesync.config.constants import DAILY_LIMIT, PROFILE_OVERLAY_FIELDS

# Singleton global
_CONFIG_INSTANCE: Optional[AppConfig] = None


def get_config(reload: bool = False, config_path: str = None) -> AppConfig:
    """
    Obtém a instância global de configuração via Singleton.

    Args:
        reload: Se True, recarrega do disco.
        config_path: Caminho opcional para arquivo de config.
    """
    global _CONFIG_INSTANCE

    if _CONFIG_INSTANCE is None or reload:
        _CONFIG_INSTANCE = ConfigLoader.load(config_path)

    return _CONFIG_INSTANCE


__all__ = [
    "get_config",
    "AppConfig",
    "BackendConfig",
    "QuotaConfig",
    "MotionConfig",
    "StorageConfig",
    "LoggerConfig",
    "ConfigLoader",
    "ConfigLoaderException",
    "DAILY_LIMIT",
    "PROFILE_OVERLAY_FIELDS",
]
