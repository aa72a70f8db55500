"""
Carregador de configuração (Loader).

Lê o arquivo YAML, aplica overrides via variáveis de ambiente e
retorna uma instância válida de AppConfig.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from shakesync.config.models import AppConfig
from shakesync.core.exceptions import ConfigurationException
from shakesync.utils.env import parse_bool


class ConfigLoaderException(ConfigurationException):
    """Erro ao carregar configurações."""
    pass


class ConfigLoader:
    """Carregador de configurações."""

    DEFAULT_FILENAME = "config.yaml"
    ENV_FILE = ".env"

    @classmethod
    def load(cls, path: Optional[Path | str] = None, *, use_dotenv: bool = True) -> AppConfig:
        """
        Carrega a configuração completa.

        Ordem de precedência:
        1. Defaults do código
        2. Arquivo YAML
        3. Variáveis de Ambiente (SHAKESYNC_*), incluindo as do .env

        Raises:
            ConfigLoaderException: Se houver erro de parsing, IO ou validação.
        """
        if use_dotenv:
            load_dotenv(cls.ENV_FILE, override=False)

        config_path = Path(path) if path else Path(os.getenv("SHAKESYNC_CONFIG", cls.DEFAULT_FILENAME))

        file_data = cls._read_yaml(config_path)
        merged_data = cls._apply_env_overrides(file_data)

        try:
            return AppConfig.from_dict(merged_data)
        except Exception as e:
            raise ConfigLoaderException(f"Erro ao validar configuração: {e}", cause=e) from e

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        """Lê arquivo YAML com segurança."""
        if not path.exists():
            return {}

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigLoaderException(f"Erro ao ler arquivo {path}: {e}", cause=e) from e

        if not isinstance(data, dict):
            raise ConfigLoaderException(f"Arquivo {path} deve conter um mapeamento na raiz")
        return data

    @classmethod
    def _apply_env_overrides(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """Aplica overrides via variáveis de ambiente (SHAKESYNC_...)."""
        out = {k: (dict(v) if isinstance(v, dict) else v) for k, v in data.items()}

        # Mapeamento: ENV_VAR -> (path.no.dict, type_func)
        overrides = {
            "SHAKESYNC_DEBUG": (["debug"], cls._parse_bool),
            "SHAKESYNC_ENVIRONMENT": (["environment"], str),
            "SHAKESYNC_BASE_URL": (["backend", "base_url"], str),
            "SHAKESYNC_OFFLINE": (["backend", "offline_mode"], cls._parse_bool),
            "SHAKESYNC_DAILY_LIMIT": (["quota", "daily_limit"], int),
            "SHAKESYNC_TIMEZONE": (["quota", "timezone"], str),
            "SHAKESYNC_STATE_FILE": (["storage", "state_file"], str),
            "SHAKESYNC_STORAGE": (["storage", "backend"], str),
            "SHAKESYNC_LOG_LEVEL": (["logging", "nivel_minimo"], str),
        }

        for env_var, (keys, type_func) in overrides.items():
            val = os.getenv(env_var)
            if val is None or val == "":
                continue
            try:
                cls._set_nested(out, keys, type_func(val))
            except ValueError as e:
                raise ConfigLoaderException(
                    f"Valor inválido em {env_var}: {val!r}", details={"env": env_var}, cause=e
                ) from e

        return out

    @staticmethod
    def _set_nested(data: Dict[str, Any], keys: list, value: Any) -> None:
        """Helper para setar valor em dict aninhado."""
        current = data
        for key in keys[:-1]:
            current = current.setdefault(key, {})
        current[keys[-1]] = value

    @staticmethod
    def _parse_bool(val: str) -> bool:
        """Parse seguro de boolean."""
        return bool(parse_bool(val, False))
