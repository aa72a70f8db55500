"""Funcoes auxiliares para ler variaveis de ambiente de forma consistente."""

from __future__ import annotations

import os
from typing import Optional

_TRUTHY = {"1", "true", "sim", "yes", "on"}
_FALSY = {"0", "false", "nao", "no", "off"}


def parse_bool(valor: str, padrao: Optional[bool] = None) -> Optional[bool]:
    """Converte texto livre em booleano, devolvendo ``padrao`` quando ambiguo."""

    normalizado = valor.strip().lower()
    if normalizado in _TRUTHY:
        return True
    if normalizado in _FALSY:
        return False
    return padrao


def get_env_bool(nome: str, padrao: Optional[bool] = None) -> Optional[bool]:
    """Interpreta a variavel ``nome`` como booleana caso exista."""

    valor = os.getenv(nome)
    if valor is None or not valor.strip():
        return padrao
    return parse_bool(valor, padrao)


__all__ = ["parse_bool", "get_env_bool"]
