"""
Sistema de injeção de dependências do ShakeSync.

Gerencia as dependências da aplicação usando dependency-injector.
Serviços com estado (token, overlay, cota) são singletons do container,
nunca globais de módulo.
"""

from __future__ import annotations

from dependency_injector import containers, providers

from shakesync.adapters.api import BackendAPI, OfflineBackend
from shakesync.adapters.repositories import InMemoryStateRepository, JsonFileStateRepository
from shakesync.config import AppConfig, get_config
from shakesync.core.clock import Clock
from shakesync.core.interfaces import BackendGateway, StateRepository
from shakesync.core.services import (
    AccountService,
    ActivityFeed,
    CredentialStore,
    EventRecorder,
    FallbackCounterStore,
    ProfileOverlayCache,
    QuotaWindowTracker,
    ReconciliationEngine,
    SafeStateAccess,
    ShakeSession,
)
from shakesync.infrastructure.logging import configurar_logging


def _build_state_repository(config: AppConfig, logger) -> StateRepository:
    if config.storage.backend == "memory":
        return InMemoryStateRepository()
    return JsonFileStateRepository(config.state_path, logger=logger)


def _build_backend(
    config: AppConfig,
    credentials: CredentialStore,
    state: SafeStateAccess,
    clock: Clock,
    logger,
) -> BackendGateway:
    if config.backend.offline_mode:
        logger.aviso("Modo offline ativo: usando backend local", armazenamento=config.storage.backend)
        return OfflineBackend(clock=clock, daily_limit=config.quota.daily_limit, state=state)
    return BackendAPI(
        base_url=config.base_url,
        credentials=credentials,
        logger=logger,
        timeout=config.backend.timeout,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Container de injeção de dependências da aplicação."""

    config = providers.Singleton(get_config)

    logger = providers.Singleton(
        lambda config: configurar_logging(config.logging),
        config=config,
    )

    clock = providers.Singleton(Clock, timezone_name=config.provided.quota.timezone)

    # Persistência local
    state_repository = providers.Singleton(_build_state_repository, config=config, logger=logger)
    state = providers.Singleton(SafeStateAccess, repository=state_repository, logger=logger)

    credentials = providers.Singleton(CredentialStore, state=state, logger=logger)
    overlays = providers.Singleton(ProfileOverlayCache, state=state)

    # Backend (HTTP ou em memória)
    backend = providers.Singleton(
        _build_backend,
        config=config,
        credentials=credentials,
        state=state,
        clock=clock,
        logger=logger,
    )

    # Cota e reconciliação
    quota = providers.Singleton(
        QuotaWindowTracker,
        state=state,
        clock=clock,
        limit=config.provided.quota.daily_limit,
        logger=logger,
    )
    fallback = providers.Singleton(FallbackCounterStore, state=state)
    reconciler = providers.Singleton(
        ReconciliationEngine,
        backend=backend,
        quota=quota,
        fallback=fallback,
        clock=clock,
        logger=logger,
    )
    recorder = providers.Singleton(
        EventRecorder,
        backend=backend,
        quota=quota,
        fallback=fallback,
        reconciler=reconciler,
        clock=clock,
        submit_timeout=config.provided.quota.submit_timeout,
        logger=logger,
    )

    # Serviços de aplicação
    activity_feed = providers.Singleton(ActivityFeed, backend=backend, logger=logger)
    account_service = providers.Singleton(
        AccountService,
        backend=backend,
        credentials=credentials,
        overlays=overlays,
        activity_feed=activity_feed,
        logger=logger,
    )
    session = providers.Singleton(
        ShakeSession,
        recorder=recorder,
        quota=quota,
        reconciler=reconciler,
        threshold=config.provided.motion.threshold,
        debounce_ms=config.provided.motion.debounce_ms,
        tick_interval=config.provided.quota.refresh_interval,
        logger=logger,
    )


# Container global (singleton)
_container: ApplicationContainer | None = None


def get_container() -> ApplicationContainer:
    """Obtém o container global da aplicação."""
    global _container
    if _container is None:
        _container = ApplicationContainer()
    return _container


def override_config(config: AppConfig) -> None:
    """Sobrescreve a configuração do container global."""
    container = get_container()
    container.config.override(providers.Object(config))


def reset_container() -> None:
    """Reseta o container global e suas dependências."""
    global _container
    if _container is not None:
        _container.reset_singletons()
        _container.config.reset_override()
        _container = None


__all__ = [
    "ApplicationContainer",
    "get_container",
    "override_config",
    "reset_container",
]
