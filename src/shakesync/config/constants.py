"""
Constantes globais do ShakeSync.

Centraliza valores fixos do domínio (cota, chaves de armazenamento,
endpoints) para que serviços e adapters compartilhem a mesma fonte.
"""

from typing import Dict, FrozenSet, Set

# ============================================================================
# Definições de Domínio
# ============================================================================

# Ambientes de execução suportados
VALID_ENVIRONMENTS: Set[str] = {"dev", "staging", "prod"}

# Backends de armazenamento local suportados
VALID_STORAGE_BACKENDS: Set[str] = {"memory", "file"}

# Limite padrão de shakes por dia
DAILY_LIMIT: int = 5

# Campos do perfil gerenciados apenas pelo cliente
PROFILE_OVERLAY_FIELDS: FrozenSet[str] = frozenset({"avatarIndex", "bio", "phone"})

# Códigos de erro do backend que indicam cota esgotada
QUOTA_ERROR_CODES: FrozenSet[str] = frozenset({"DAILY_LIMIT_REACHED", "QUOTA_EXCEEDED"})

# ============================================================================
# Backend
# ============================================================================

BACKEND_URLS: Dict[str, str] = {
    "dev": "http://localhost:4000",
    "staging": "https://staging-adminmanagementsystem.up.railway.app",
    "prod": "https://adminmanagementsystem.up.railway.app",
}

ENDPOINTS: Dict[str, str] = {
    "login": "/api/auth/login",
    "register": "/api/auth/register",
    "me": "/api/auth/me",
    "forgot_password": "/api/auth/forgot-password",
    "users_me": "/api/users/me",
    "shakes": "/api/shakes",
    "activities": "/api/activities",
    "feedbacks": "/api/feedbacks",
}

# ============================================================================
# Chaves de armazenamento local
# ============================================================================

STORAGE_KEYS: Dict[str, str] = {
    "token": "auth.token",
    "overlay": "profile.overlay",
    "quota_date": "quota.date_key",
    "quota_count": "quota.count",
    "fallback_daily": "fallback.daily_count",
    "fallback_date": "fallback.daily_date",
    "fallback_total": "fallback.total_count",
    "user_key": "auth.user_key",
}

# Prefixo das chaves do backend offline (usuários, shakes, atividades)
OFFLINE_KEY_PREFIX: str = "offline."

# ============================================================================
# Logging
# ============================================================================

LEVEL_VALUES: Dict[str, int] = {
    "DEBUG": 10,
    "INFO": 20,
    "SUCCESS": 25,  # Nível customizado
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}

# ============================================================================
# Padrões e Timeouts
# ============================================================================

DEFAULTS = {
    "state_file": "shakesync_state.json",
    "timeout_api": 15,
    "submit_timeout": 30.0,
    "refresh_interval": 60,
    "motion_threshold": 1.5,
    "motion_debounce_ms": 1000,
    "activities_limit": 20,
}
