"""Utilitarios compartilhados."""

from shakesync.utils.env import get_env_bool, parse_bool

__all__ = ["get_env_bool", "parse_bool"]
