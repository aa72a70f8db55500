"""
Implementações do repositório de estado local.
"""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from shakesync.core.exceptions import StorageException, wrap_exception
from shakesync.core.interfaces import StateRepository
from shakesync.infrastructure.logging import get_logger


class InMemoryStateRepository(StateRepository):
    """
    Implementação em memória (não persistente entre reinícios).
    Útil para testes e para o modo offline.
    """

    def __init__(self, initial: Dict[str, Any] | None = None):
        self._storage: Dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._storage.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._storage[key] = value

    def delete(self, key: str) -> None:
        self._storage.pop(key, None)

    def keys(self) -> Iterable[str]:
        return list(self._storage)


class JsonFileStateRepository(StateRepository):
    """
    Estado em um único arquivo JSON.

    Cada escrita regrava o arquivo inteiro via arquivo temporário + replace,
    então uma interrupção nunca deixa JSON pela metade. Um arquivo com JSON
    inválido é tratado como vazio, e a próxima escrita o substitui.
    """

    def __init__(self, path: Path | str, logger: Optional[Any] = None):
        self.path = Path(path)
        self.logger = logger or get_logger()
        self._lock = threading.Lock()
        self._cache: Dict[str, Any] | None = None

    def _load(self) -> Dict[str, Any]:
        if self._cache is not None:
            return self._cache
        if not self.path.exists():
            self._cache = {}
            return self._cache
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            self.logger.aviso("Estado local corrompido, recomeçando do zero", path=str(self.path), erro=str(e))
            data = {}
        except OSError as e:
            raise wrap_exception(e, StorageException, "Erro ao ler estado local", path=str(self.path))
        self._cache = data if isinstance(data, dict) else {}
        return self._cache

    def _flush(self, data: Dict[str, Any]) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except (OSError, TypeError, ValueError) as e:
            raise wrap_exception(e, StorageException, "Erro ao gravar estado local", path=str(self.path))

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = dict(self._load())
            data[key] = value
            self._flush(data)
            self._cache = data

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key not in data:
                return
            data = {k: v for k, v in data.items() if k != key}
            self._flush(data)
            self._cache = data

    def keys(self) -> Iterable[str]:
        with self._lock:
            return list(self._load())
