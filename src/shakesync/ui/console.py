"""
Saída de console da CLI (Rich).

Mensagens têm um nível (info, success, warning, error) que define ícone e
estilo. Os estilos ``backend`` e ``local`` marcam a origem dos contadores
nas tabelas.
"""

from typing import Optional

from rich.console import Console
from rich.theme import Theme

from shakesync.core.models import EventRecord, ResetCountdown

SHAKESYNC_THEME = Theme({
    "info": "cyan",
    "success": "bold green",
    "warning": "yellow",
    "error": "bold red",
    "backend": "green",
    "local": "yellow",
    "limit": "bold magenta",
    "reward": "magenta",
})

_ICONS = {"info": "ℹ", "success": "✔", "warning": "⚠", "error": "✖"}

_console = Console(theme=SHAKESYNC_THEME)


def get_console() -> Console:
    return _console


def notify(level: str, message: str) -> None:
    """Imprime ``message`` com o ícone do nível; erros ficam inteiros em vermelho."""
    icon = _ICONS.get(level, "•")
    if level == "error":
        _console.print(f"[error]{icon} {message}[/error]")
    else:
        _console.print(f"[{level}]{icon}[/{level}] {message}")


def print_shake(record: EventRecord) -> None:
    """Resultado de um shake: aceito pelo backend ou contado só localmente."""
    if record.is_local:
        notify("warning", "Sem conexão: shake contabilizado localmente.")
        return
    payload = record.reward_payload or {}
    reward = payload.get("name") or payload.get("title") or payload.get("reward")
    extra = f" Recompensa: [reward]{reward}[/reward]" if reward else ""
    notify("success", f"Shake registrado ({record.id}).{extra}")


def print_limit_reached(limit: Optional[int], countdown: Optional[ResetCountdown] = None) -> None:
    renova = f" Renova em {countdown}." if countdown is not None else " Volte amanhã!"
    _console.print(f"[limit]⛔ Limite diário atingido ({limit or '?'} shakes).[/limit]{renova}")
