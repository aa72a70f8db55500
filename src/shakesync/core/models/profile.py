"""Modelos de perfil."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class ProfileUpdateResult:
    """
    Resultado de uma atualização de perfil.

    ``skipped`` indica que o backend não suporta o endpoint e a alteração
    ficou apenas no overlay local.
    """

    profile: Dict[str, Any]
    overlay: Dict[str, Any] = field(default_factory=dict)
    skipped: bool = False
