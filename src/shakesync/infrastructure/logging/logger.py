"""
Logger principal do ShakeSync.

API toda em portugues (``info``, ``sucesso``, ``aviso``, ``erro``...) com
saida colorida via Rich, arquivo opcional e contexto fixo por escopo::

    log = get_logger()
    log.info("Sincronizando contadores", diario=3)

    with log.etapa("Envio do shake"):
        ...

    log.com_contexto(usuario="alice@example.com").sucesso("Login concluido")
"""

from __future__ import annotations

import atexit
import os
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional, TextIO

from rich.console import Console
from rich.text import Text
from rich.theme import Theme
from rich.traceback import install as install_rich_traceback

from shakesync.config.constants import LEVEL_VALUES
from shakesync.config.models import LoggerConfig
from shakesync.utils.env import get_env_bool

# Nomes em portugues -> nivel numerico
_NIVEIS: Dict[str, int] = {
    "debug": LEVEL_VALUES["DEBUG"],
    "info": LEVEL_VALUES["INFO"],
    "sucesso": LEVEL_VALUES["SUCCESS"],
    "aviso": LEVEL_VALUES["WARNING"],
    "erro": LEVEL_VALUES["ERROR"],
    "critico": LEVEL_VALUES["CRITICAL"],
}

_TEMA = Theme(
    {
        "log.time": "cyan dim",
        "log.debug": "dim",
        "log.info": "white",
        "log.sucesso": "bold green",
        "log.aviso": "yellow",
        "log.erro": "bold red",
        "log.critico": "white on red",
        "log.contexto": "bright_black",
    }
)

_traceback_instalado = False


def config_from_env(base: Optional[LoggerConfig] = None) -> LoggerConfig:
    """Aplica LOG_LEVEL, LOG_FILE, LOG_OVERWRITE e LOG_COLOR sobre ``base``."""

    cfg = base or LoggerConfig()
    nivel = os.getenv("LOG_LEVEL")
    if nivel and nivel.upper() in LEVEL_VALUES:
        cfg.nivel_minimo = nivel.upper()

    arquivo = os.getenv("LOG_FILE")
    if arquivo:
        cfg.arquivo_log = Path(arquivo)

    sobrescrever = get_env_bool("LOG_OVERWRITE")
    if sobrescrever is not None:
        cfg.sobrescrever_arquivo = sobrescrever

    usar_cores = get_env_bool("LOG_COLOR")
    if usar_cores is not None:
        cfg.usar_cores = usar_cores

    return cfg


class ShakeLogger:
    """Logger com niveis em portugues, contexto padrao e escrita em arquivo."""

    def __init__(self, config: Optional[LoggerConfig] = None, console: Optional[Console] = None) -> None:
        self._config = config or LoggerConfig()
        self._console = console or self._criar_console(self._config)
        self._nivel_minimo = LEVEL_VALUES[self._config.nivel_minimo.upper()]
        self._arquivo: Optional[TextIO] = None
        self._contexto_padrao: Dict[str, Any] = {}

    @staticmethod
    def _criar_console(config: LoggerConfig) -> Console:
        if config.usar_cores:
            return Console(theme=_TEMA, highlight=False, stderr=True)
        return Console(theme=_TEMA, highlight=False, no_color=True, stderr=True)

    # ------------------------------------------------------------------
    # Configuracao e contexto
    # ------------------------------------------------------------------

    @property
    def config(self) -> LoggerConfig:
        return self._config

    @property
    def console(self) -> Console:
        return self._console

    def configure(self, config: LoggerConfig) -> None:
        """Aplica uma nova configuracao, reabrindo o arquivo quando necessario."""

        global _traceback_instalado

        self.close()
        self._config = config
        self._nivel_minimo = LEVEL_VALUES[config.nivel_minimo.upper()]
        self._console = self._criar_console(config)

        if config.registrar_traceback_rico and not _traceback_instalado:
            install_rich_traceback(show_locals=False)
            _traceback_instalado = True

    def set_level(self, nivel: str) -> None:
        """Ajusta o nivel minimo em tempo de execucao."""

        self._config.nivel_minimo = nivel.upper()
        self._nivel_minimo = LEVEL_VALUES.get(nivel.upper(), LEVEL_VALUES["INFO"])

    def atualizar_contexto_padrao(self, **dados: Any) -> None:
        """Campos que aparecem em todos os logs seguintes."""

        self._contexto_padrao.update(_sem_nulos(dados))

    def limpar_contexto_padrao(self, *chaves: str) -> None:
        if not chaves:
            self._contexto_padrao.clear()
            return
        for chave in chaves:
            self._contexto_padrao.pop(chave, None)

    def com_contexto(self, **dados: Any) -> "_LoggerComContexto":
        """Retorna um logger derivado que anexa ``dados`` a cada mensagem."""

        return _LoggerComContexto(self, _sem_nulos(dados))

    # ------------------------------------------------------------------
    # API publica
    # ------------------------------------------------------------------

    def debug(self, mensagem: str, **dados: Any) -> None:
        self._log("debug", mensagem, dados)

    def info(self, mensagem: str, **dados: Any) -> None:
        self._log("info", mensagem, dados)

    def sucesso(self, mensagem: str, **dados: Any) -> None:
        self._log("sucesso", mensagem, dados)

    def aviso(self, mensagem: str, **dados: Any) -> None:
        self._log("aviso", mensagem, dados)

    def erro(self, mensagem: str, **dados: Any) -> None:
        self._log("erro", mensagem, dados)

    def critico(self, mensagem: str, **dados: Any) -> None:
        self._log("critico", mensagem, dados)

    @contextmanager
    def etapa(self, titulo: str, **dados: Any) -> Iterator[None]:
        """Registra inicio, conclusao ou falha de um bloco de trabalho."""

        with self._etapa(titulo, dados, None):
            yield

    # ------------------------------------------------------------------
    # Implementacao interna
    # ------------------------------------------------------------------

    @contextmanager
    def _etapa(self, titulo: str, dados: Mapping[str, Any], extra: Optional[Mapping[str, Any]]) -> Iterator[None]:
        self._log("info", f"Iniciando etapa: {titulo}", dados, extra)
        try:
            yield
        except Exception as e:
            self._log("erro", f"Falha na etapa: {titulo}", {**dados, "erro": type(e).__name__}, extra)
            raise
        self._log("sucesso", f"Etapa concluida: {titulo}", dados, extra)

    def _log(
        self,
        nivel: str,
        mensagem: str,
        dados: Mapping[str, Any],
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        if _NIVEIS[nivel] < self._nivel_minimo:
            return

        contexto = dict(self._contexto_padrao)
        if extra:
            contexto.update(extra)
        contexto.update(_sem_nulos(dados))

        self._console.print(self._linha_console(nivel, mensagem, contexto))
        if self._config.arquivo_log:
            self._escrever_arquivo(nivel, mensagem, contexto)

    def _linha_console(self, nivel: str, mensagem: str, contexto: Mapping[str, Any]) -> Text:
        texto = Text()
        if self._config.mostrar_tempo:
            texto.append(datetime.now().strftime("%H:%M:%S"), style="log.time")
            texto.append("  ")
        estilo = f"log.{nivel}"
        texto.append(f"[{nivel.upper()}]", style=estilo)
        texto.append("  ")
        texto.append(mensagem, style=estilo)
        if contexto:
            texto.append("  ")
            texto.append(_formatar_contexto(contexto), style="log.contexto")
        return texto

    def _escrever_arquivo(self, nivel: str, mensagem: str, contexto: Mapping[str, Any]) -> None:
        if self._arquivo is None:
            caminho = Path(self._config.arquivo_log)
            caminho.parent.mkdir(parents=True, exist_ok=True)
            modo = "w" if self._config.sobrescrever_arquivo else "a"
            self._arquivo = caminho.open(modo, encoding="utf-8")
            atexit.register(self.close)

        partes = [datetime.now().strftime("%Y-%m-%d %H:%M:%S"), nivel.upper(), mensagem]
        if contexto:
            partes.append(_formatar_contexto(contexto))
        self._arquivo.write(" | ".join(partes) + "\n")
        self._arquivo.flush()

    def close(self) -> None:
        """Fecha o arquivo de log (quando houver)."""

        if self._arquivo is not None:
            self._arquivo.close()
            self._arquivo = None


class _LoggerComContexto:
    """Logger derivado que carrega contexto fixo."""

    def __init__(self, base: ShakeLogger, contexto: Mapping[str, Any]) -> None:
        self._base = base
        self._contexto = dict(contexto)

    def com_contexto(self, **dados: Any) -> "_LoggerComContexto":
        return _LoggerComContexto(self._base, {**self._contexto, **_sem_nulos(dados)})

    def debug(self, mensagem: str, **dados: Any) -> None:
        self._base._log("debug", mensagem, dados, self._contexto)

    def info(self, mensagem: str, **dados: Any) -> None:
        self._base._log("info", mensagem, dados, self._contexto)

    def sucesso(self, mensagem: str, **dados: Any) -> None:
        self._base._log("sucesso", mensagem, dados, self._contexto)

    def aviso(self, mensagem: str, **dados: Any) -> None:
        self._base._log("aviso", mensagem, dados, self._contexto)

    def erro(self, mensagem: str, **dados: Any) -> None:
        self._base._log("erro", mensagem, dados, self._contexto)

    def critico(self, mensagem: str, **dados: Any) -> None:
        self._base._log("critico", mensagem, dados, self._contexto)

    @contextmanager
    def etapa(self, titulo: str, **dados: Any) -> Iterator[None]:
        with self._base._etapa(titulo, dados, self._contexto):
            yield


def _sem_nulos(dados: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in dados.items() if v is not None}


def _formatar_contexto(valores: Mapping[str, Any]) -> str:
    partes = []
    for chave in sorted(valores):
        valor = valores[chave]
        if isinstance(valor, str) and (" " in valor or valor != valor.strip()):
            valor = repr(valor)
        partes.append(f"{chave}={valor}")
    return " ".join(partes)
