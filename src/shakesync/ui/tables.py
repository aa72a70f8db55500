"""
Componentes de Tabela para a UI.
"""

from datetime import datetime
from typing import Any, Dict, List

from rich import box
from rich.table import Table

from shakesync.core.models import Activity, CounterSnapshot, EventRecord, ResetCountdown
from shakesync.core.timestamps import format_display_time
from shakesync.ui.console import get_console


def create_table(title: str, columns: List[str]) -> Table:
    """Cria uma tabela padronizada."""
    table = Table(title=title, box=box.ROUNDED, header_style="bold cyan")
    for col in columns:
        table.add_column(col)
    return table


def show_counters(snapshot: CounterSnapshot, countdown: ResetCountdown) -> None:
    """Exibe contadores do dia, total e tempo até a virada."""
    origem = "[backend]backend[/backend]" if snapshot.synced else "[local]local[/local]"
    table = create_table("Shakes", ["Métrica", "Valor"])
    table.add_row("Hoje", f"{snapshot.daily}/{snapshot.limit}")
    table.add_row("Restantes", str(snapshot.remaining))
    table.add_row("Total", str(snapshot.total))
    table.add_row("Origem", origem)
    table.add_row("Renova em", str(countdown))
    get_console().print(table)


def show_profile(profile: Dict[str, Any]) -> None:
    table = create_table("Perfil", ["Campo", "Valor"])
    for key in sorted(profile):
        table.add_row(key, str(profile[key]))
    get_console().print(table)


def show_activities(activities: List[Activity], now: datetime) -> None:
    if not activities:
        get_console().print("[info]Nenhuma atividade recente.[/info]")
        return
    table = create_table("Atividades Recentes", ["Quando", "Tipo", "Título"])
    for activity in activities:
        table.add_row(format_display_time(activity.timestamp, now), activity.kind, activity.title or "-")
    get_console().print(table)


def show_history(records: List[EventRecord], now: datetime) -> None:
    if not records:
        get_console().print("[info]Nenhum shake no período.[/info]")
        return
    table = create_table("Histórico de Shakes", ["Quando", "Qtd", "Recompensa"])
    for record in records:
        reward = record.reward_payload or {}
        label = reward.get("name") or reward.get("title") or "-"
        table.add_row(format_display_time(record.timestamp, now), str(record.count), str(label))
    get_console().print(table)
