"""
Modelos de dados de configuração.

Define a estrutura tipada das configurações usando Dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from shakesync.config.constants import (
    BACKEND_URLS,
    DAILY_LIMIT,
    DEFAULTS,
    LEVEL_VALUES,
    VALID_ENVIRONMENTS,
    VALID_STORAGE_BACKENDS,
)
from shakesync.config.validators import (
    ensure_path_exists,
    validate_choice,
    validate_positive_float,
    validate_positive_int,
    validate_timezone,
    validate_type,
    validate_url,
)


@dataclass
class LoggerConfig:
    """Configuração para o sistema de logging."""

    nome: str = "shakesync"
    nivel_minimo: str = "INFO"
    arquivo_log: Optional[Path] = None
    sobrescrever_arquivo: bool = False
    mostrar_tempo: bool = True
    usar_cores: bool = True
    registrar_traceback_rico: bool = False

    def __post_init__(self):
        validate_choice(self.nivel_minimo.upper(), set(LEVEL_VALUES.keys()), "nivel_minimo")
        self.nivel_minimo = self.nivel_minimo.upper()
        if self.arquivo_log:
            self.arquivo_log = ensure_path_exists(self.arquivo_log)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> LoggerConfig:
        clean = {k: v for k, v in data.items() if k in cls.__annotations__}

        if "usar_cores" in clean: validate_type(clean["usar_cores"], bool, "logging.usar_cores")
        if "mostrar_tempo" in clean: validate_type(clean["mostrar_tempo"], bool, "logging.mostrar_tempo")
        if "nivel_minimo" in clean: validate_type(clean["nivel_minimo"], str, "logging.nivel_minimo")

        if clean.get("arquivo_log"):
            clean["arquivo_log"] = Path(clean["arquivo_log"])

        return cls(**clean)


@dataclass
class BackendConfig:
    """Configuração de acesso ao backend REST."""

    base_url: Optional[str] = None
    timeout: int = DEFAULTS["timeout_api"]
    offline_mode: bool = False

    def __post_init__(self):
        validate_url(self.base_url, "backend.base_url")
        validate_positive_int(self.timeout, "backend.timeout")

    def resolve_url(self, environment: str) -> str:
        """URL efetiva: override explícito ou a URL do ambiente."""
        return (self.base_url or BACKEND_URLS[environment]).rstrip("/")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> BackendConfig:
        clean = {k: v for k, v in data.items() if k in cls.__annotations__}

        if "base_url" in clean: validate_type(clean["base_url"], str, "backend.base_url")
        if "timeout" in clean: validate_type(clean["timeout"], int, "backend.timeout")
        if "offline_mode" in clean: validate_type(clean["offline_mode"], bool, "backend.offline_mode")

        return cls(**clean)


@dataclass
class QuotaConfig:
    """Configuração da janela de cota diária."""

    daily_limit: int = DAILY_LIMIT
    submit_timeout: float = DEFAULTS["submit_timeout"]
    refresh_interval: int = DEFAULTS["refresh_interval"]
    timezone: Optional[str] = None

    def __post_init__(self):
        validate_positive_int(self.daily_limit, "quota.daily_limit")
        validate_positive_float(self.submit_timeout, "quota.submit_timeout")
        validate_positive_int(self.refresh_interval, "quota.refresh_interval")
        validate_timezone(self.timezone, "quota.timezone")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> QuotaConfig:
        clean = {k: v for k, v in data.items() if k in cls.__annotations__}

        if "daily_limit" in clean: validate_type(clean["daily_limit"], int, "quota.daily_limit")
        if "submit_timeout" in clean: validate_type(clean["submit_timeout"], (int, float), "quota.submit_timeout")
        if "refresh_interval" in clean: validate_type(clean["refresh_interval"], int, "quota.refresh_interval")
        if "timezone" in clean: validate_type(clean["timezone"], str, "quota.timezone")

        return cls(**clean)


@dataclass
class MotionConfig:
    """Parâmetros do detector de movimento."""

    threshold: float = DEFAULTS["motion_threshold"]
    debounce_ms: int = DEFAULTS["motion_debounce_ms"]

    def __post_init__(self):
        validate_positive_float(self.threshold, "motion.threshold")
        validate_positive_int(self.debounce_ms, "motion.debounce_ms", min_value=0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MotionConfig:
        clean = {k: v for k, v in data.items() if k in cls.__annotations__}

        if "threshold" in clean: validate_type(clean["threshold"], (int, float), "motion.threshold")
        if "debounce_ms" in clean: validate_type(clean["debounce_ms"], int, "motion.debounce_ms")

        return cls(**clean)


@dataclass
class StorageConfig:
    """Onde o estado local (token, overlay, contadores) é persistido."""

    backend: str = "file"
    state_file: Optional[Path] = None

    def __post_init__(self):
        validate_choice(self.backend, VALID_STORAGE_BACKENDS, "storage.backend")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> StorageConfig:
        clean = {k: v for k, v in data.items() if k in cls.__annotations__}

        if "backend" in clean: validate_type(clean["backend"], str, "storage.backend")
        if clean.get("state_file"):
            clean["state_file"] = Path(clean["state_file"])

        return cls(**clean)


@dataclass
class AppConfig:
    """
    Configuração raiz da aplicação.
    Agrega todas as outras configurações.
    """

    app_name: str = "ShakeSync"
    version: str = "1.0.0"
    debug: bool = False
    environment: str = "prod"

    data_dir: Optional[Path] = None

    backend: Optional[BackendConfig] = None
    quota: Optional[QuotaConfig] = None
    motion: Optional[MotionConfig] = None
    storage: Optional[StorageConfig] = None
    logging: Optional[LoggerConfig] = None

    def __post_init__(self):
        validate_choice(self.environment, VALID_ENVIRONMENTS, "environment")

        if self.backend is None: self.backend = BackendConfig()
        if self.quota is None: self.quota = QuotaConfig()
        if self.motion is None: self.motion = MotionConfig()
        if self.storage is None: self.storage = StorageConfig()
        if self.logging is None: self.logging = LoggerConfig()

        if self.debug:
            self.logging.nivel_minimo = "DEBUG"

    @property
    def is_dev(self) -> bool:
        return self.environment == "dev"

    @property
    def base_url(self) -> str:
        return self.backend.resolve_url(self.environment)

    @property
    def state_path(self) -> Path:
        """Arquivo de estado efetivo (state_file ou data_dir/padrão)."""
        if self.storage.state_file:
            return ensure_path_exists(self.storage.state_file)
        base = self.data_dir or Path.home() / ".shakesync"
        return ensure_path_exists(Path(base) / DEFAULTS["state_file"])

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AppConfig:
        backend = BackendConfig.from_dict(data.get("backend") or {})
        quota = QuotaConfig.from_dict(data.get("quota") or {})
        motion = MotionConfig.from_dict(data.get("motion") or {})
        storage = StorageConfig.from_dict(data.get("storage") or {})
        logging = LoggerConfig.from_dict(data.get("logging") or {})

        nested_keys = {"backend", "quota", "motion", "storage", "logging"}
        root_args = {k: v for k, v in data.items() if k in cls.__annotations__ and k not in nested_keys}

        if "debug" in root_args: validate_type(root_args["debug"], bool, "debug")
        if "environment" in root_args: validate_type(root_args["environment"], str, "environment")
        if root_args.get("data_dir"):
            root_args["data_dir"] = Path(root_args["data_dir"])

        return cls(
            **root_args,
            backend=backend,
            quota=quota,
            motion=motion,
            storage=storage,
            logging=logging,
        )
