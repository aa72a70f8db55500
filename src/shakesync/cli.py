"""Ponto de entrada da Interface de Linha de Comando (CLI) do ShakeSync."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Optional

import typer
from dependency_injector import providers
from typing_extensions import Annotated

from shakesync.config import ConfigLoader
from shakesync.container import ApplicationContainer
from shakesync.core.exceptions import (
    AuthenticationException,
    QuotaExceededException,
    ShakeSyncBaseException,
)
from shakesync.core.models import MotionSample
from shakesync.ui.console import notify, print_limit_reached, print_shake
from shakesync.ui.tables import show_activities, show_counters, show_history, show_profile

# --- Configuração da Aplicação CLI ---
app = typer.Typer(
    name="shakesync",
    help="Contador diário de shakes com sincronização offline-first.",
    add_completion=False,
    rich_markup_mode="rich",
)
profile_app = typer.Typer(name="profile", help="Ver e editar o perfil.")
app.add_typer(profile_app, no_args_is_help=True)


def _container(ctx: typer.Context) -> ApplicationContainer:
    return ctx.obj


def _run(coro: Awaitable[Any]) -> Any:
    """Executa a corrotina traduzindo erros do domínio em códigos de saída."""
    try:
        return asyncio.run(coro)
    except QuotaExceededException as e:
        print_limit_reached(e.limit)
        raise typer.Exit(code=2)
    except AuthenticationException as e:
        notify("error", f"Autenticação necessária: {e.message}")
        raise typer.Exit(code=3)
    except ShakeSyncBaseException as e:
        notify("error", str(e))
        raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[str],
        typer.Option("--config", "-c", help="Caminho do config.yaml."),
    ] = None,
    offline: Annotated[
        bool,
        typer.Option("--offline", help="Usa o backend local (sem rede), gravado no arquivo de estado."),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Ativa logs de DEBUG."),
    ] = False,
) -> None:
    """Carrega a configuração e monta o container da execução."""
    try:
        app_config = ConfigLoader.load(config_path)
    except ShakeSyncBaseException as e:
        notify("error", str(e))
        raise typer.Exit(code=1)

    if offline:
        app_config.backend.offline_mode = True
    if debug:
        app_config.debug = True
        app_config.logging.nivel_minimo = "DEBUG"

    container = ApplicationContainer()
    container.config.override(providers.Object(app_config))
    ctx.obj = container


# --- Conta ---

@app.command(help="Entra com email e senha.")
def login(
    ctx: typer.Context,
    email: Annotated[str, typer.Option("--email", "-e", prompt=True)],
    password: Annotated[str, typer.Option("--password", "-p", prompt=True, hide_input=True)],
) -> None:
    user = _run(_container(ctx).account_service().login(email, password))
    notify("success", f"Bem-vindo, {user.get('name') or user.get('email') or email}!")


@app.command(help="Cria uma conta nova.")
def register(
    ctx: typer.Context,
    name: Annotated[str, typer.Option("--name", "-n", prompt=True)],
    email: Annotated[str, typer.Option("--email", "-e", prompt=True)],
    password: Annotated[str, typer.Option("--password", "-p", prompt=True, hide_input=True, confirmation_prompt=True)],
) -> None:
    _run(_container(ctx).account_service().register(name, email, password))
    notify("success", "Conta criada.")


@app.command(help="Encerra a sessão e limpa o cache local do perfil.")
def logout(ctx: typer.Context) -> None:
    _container(ctx).account_service().logout()
    notify("info", "Sessão encerrada.")


@app.command("reset-password", help="Envia instruções de redefinição de senha.")
def reset_password(
    ctx: typer.Context,
    email: Annotated[str, typer.Option("--email", "-e", prompt=True)],
) -> None:
    _run(_container(ctx).account_service().send_password_reset(email))
    notify("success", f"Se {email} existir, as instruções foram enviadas.")


@app.command("delete-account", help="Remove a conta no backend.")
def delete_account(
    ctx: typer.Context,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Não pedir confirmação.")] = False,
) -> None:
    if not yes:
        typer.confirm("Remover a conta definitivamente?", abort=True)
    _run(_container(ctx).account_service().delete_account())
    notify("warning", "Conta removida.")


@app.command(help="Envia um feedback.")
def feedback(
    ctx: typer.Context,
    message: Annotated[str, typer.Argument(help="Texto do feedback.")],
    rating: Annotated[Optional[int], typer.Option("--rating", "-r", min=1, max=5)] = None,
    title: Annotated[Optional[str], typer.Option("--title", help="Título; padrão é a própria mensagem.")] = None,
    category: Annotated[str, typer.Option("--category", help="general, bug, feature ou improvement.")] = "general",
) -> None:
    _run(_container(ctx).account_service().submit_feedback(message, rating=rating, category=category, title=title))
    notify("success", "Obrigado pelo feedback!")


# --- Shakes ---

@app.command(help="Mostra contadores do dia e tempo até a renovação.")
def status(
    ctx: typer.Context,
    watch: Annotated[
        int,
        typer.Option("--watch", "-w", min=0, help="Atualiza a contagem regressiva N vezes (intervalo: quota.refresh_interval)."),
    ] = 0,
) -> None:
    container = _container(ctx)
    session = container.session()
    snapshot = _run(session.on_focus())
    show_counters(snapshot, session.tick())
    if watch:
        _run(session.watch(watch, lambda countdown: notify("info", f"Renova em {countdown}")))


@app.command(help="Registra shakes manualmente.")
def shake(
    ctx: typer.Context,
    times: Annotated[int, typer.Option("--times", "-t", min=1, help="Quantidade de shakes.")] = 1,
) -> None:
    container = _container(ctx)
    session = container.session()

    async def _shake_many() -> None:
        for _ in range(times):
            record = await session.shake()
            if record is not None:
                print_shake(record)

    _run(_shake_many())
    show_counters(session.counters(), session.tick())


@app.command(help="Simula leituras do acelerômetro alternando repouso e agitação.")
def simulate(
    ctx: typer.Context,
    samples: Annotated[int, typer.Option("--samples", "-s", min=2)] = 20,
    interval_ms: Annotated[int, typer.Option("--interval-ms", min=1)] = 300,
    intensity: Annotated[float, typer.Option("--intensity", help="Magnitude da agitação em g.")] = 3.0,
) -> None:
    container = _container(ctx)
    session = container.session()

    async def _simulate() -> int:
        fired = 0
        for i in range(samples):
            value = intensity if i % 2 else 1.0
            if session.feed_motion(MotionSample(x=0.0, y=0.0, z=value, timestamp_ms=i * interval_ms)):
                fired += 1
            await asyncio.sleep(0)
        await session.drain()
        return fired

    fired = _run(_simulate())
    notify("info", f"{fired} shake(s) detectado(s).")
    show_counters(session.counters(), session.tick())


@app.command(help="Lista atividades recentes.")
def activity(
    ctx: typer.Context,
    limit: Annotated[int, typer.Option("--limit", "-l", min=1)] = 10,
    kind: Annotated[str, typer.Option("--type", help="Tipo de atividade.")] = "shake",
) -> None:
    container = _container(ctx)
    activities = _run(container.activity_feed().recent(kind=kind, limit=limit))
    show_activities(activities, container.clock().now())


@app.command(help="Lista o histórico de shakes registrados no backend.")
def history(
    ctx: typer.Context,
    date: Annotated[Optional[str], typer.Option("--date", "-d", help="Dia específico (AAAA-MM-DD).")] = None,
    start: Annotated[Optional[str], typer.Option("--from", help="Início do intervalo (AAAA-MM-DD).")] = None,
    end: Annotated[Optional[str], typer.Option("--to", help="Fim do intervalo (AAAA-MM-DD).")] = None,
    limit: Annotated[int, typer.Option("--limit", "-l", min=1)] = 20,
) -> None:
    container = _container(ctx)
    records = _run(container.activity_feed().history(date=date, start=start, end=end, limit=limit))
    show_history(records, container.clock().now())


# --- Perfil ---

@profile_app.command("show", help="Exibe o perfil atual.")
def profile_show(ctx: typer.Context) -> None:
    show_profile(_run(_container(ctx).account_service().get_current_profile()))


@profile_app.command("set", help="Atualiza campos do perfil.")
def profile_set(
    ctx: typer.Context,
    avatar: Annotated[Optional[int], typer.Option("--avatar", min=0)] = None,
    bio: Annotated[Optional[str], typer.Option("--bio")] = None,
    phone: Annotated[Optional[str], typer.Option("--phone")] = None,
    name: Annotated[Optional[str], typer.Option("--name")] = None,
) -> None:
    fields = {"avatarIndex": avatar, "bio": bio, "phone": phone, "name": name}
    fields = {k: v for k, v in fields.items() if v is not None}
    if not fields:
        notify("warning", "Nada para atualizar.")
        raise typer.Exit(code=1)

    result = _run(_container(ctx).account_service().update_profile(fields))
    if result.skipped:
        notify("info", "Backend sem suporte: alterações salvas apenas neste dispositivo.")
    else:
        notify("success", "Perfil atualizado.")
    show_profile(result.profile)


if __name__ == "__main__":
    app()
