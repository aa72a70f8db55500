"""
Decorator de debug automático para logging de métodos.

Funciona tanto em funções síncronas quanto em corrotinas.
"""

from __future__ import annotations

import functools
import inspect
import time
from typing import Any, Callable, TypeVar

F = TypeVar('F', bound=Callable[..., Any])


def debug_log(
    enabled: bool = True,
    log_args: bool = True,
    log_result: bool = True,
    log_duration: bool = True,
    max_arg_length: int = 100,
) -> Callable[[F], F]:
    """
    Decorator que adiciona logging automático de debug em métodos.

    Loga a entrada com argumentos, a saída com resultado e duração, e
    exceções levantadas (que continuam propagando).

    Example:
        >>> @debug_log(log_result=False)
        >>> async def record_event(self):
        >>>     ...

        # DEBUG: → EventRecorder.record_event()
        # DEBUG: ← EventRecorder.record_event() [0.152s]
    """
    def decorator(func: F) -> F:
        if not enabled:
            return func

        def _entrada(args: tuple, kwargs: dict) -> tuple[Any, str, float]:
            logger = _get_logger(args)
            func_name = _get_func_full_name(func, args)
            args_str = _format_arguments(args, kwargs, max_arg_length) if log_args else ""
            logger.debug(f"→ {func_name}({args_str})")
            return logger, func_name, time.perf_counter()

        def _saida(logger: Any, func_name: str, start: float, result: Any) -> None:
            result_str = f" -> {_format_value(result, max_arg_length)}" if log_result else ""
            duration_str = f" [{time.perf_counter() - start:.3f}s]" if log_duration else ""
            logger.debug(f"← {func_name}(){result_str}{duration_str}")

        def _falha(logger: Any, func_name: str, start: float, e: Exception) -> None:
            duration_str = f" [{time.perf_counter() - start:.3f}s]" if log_duration else ""
            logger.debug(f"✗ {func_name}() raised {type(e).__name__}: {str(e)[:100]}{duration_str}")

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                logger, func_name, start = _entrada(args, kwargs)
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _falha(logger, func_name, start, e)
                    raise
                _saida(logger, func_name, start, result)
                return result

            return async_wrapper  # type: ignore

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger, func_name, start = _entrada(args, kwargs)
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _falha(logger, func_name, start, e)
                raise
            _saida(logger, func_name, start, result)
            return result

        return wrapper  # type: ignore

    return decorator


def _get_logger(args: tuple) -> Any:
    """Obtém logger do self ou usa o global."""
    if args:
        for attr in ("logger", "_logger"):
            logger = getattr(args[0], attr, None)
            if logger is not None:
                return logger

    from shakesync.infrastructure.logging import get_logger
    return get_logger()


def _get_func_full_name(func: Callable, args: tuple) -> str:
    """Nome no formato Classe.metodo quando chamado em instância."""
    if args and "." in getattr(func, "__qualname__", ""):
        return f"{args[0].__class__.__name__}.{func.__name__}"
    return getattr(func, "__qualname__", func.__name__)


def _format_arguments(args: tuple, kwargs: dict, max_length: int) -> str:
    """Formata argumentos ignorando o self."""
    positional = args[1:] if args and hasattr(args[0], "__dict__") else args
    parts = [_format_value(a, max_length) for a in positional]
    parts.extend(f"{k}={_format_value(v, max_length)}" for k, v in kwargs.items())
    return ", ".join(parts)


def _format_value(value: Any, max_length: int) -> str:
    """Representação curta de um valor para log."""
    text = repr(value)
    if len(text) > max_length:
        return text[: max_length - 3] + "..."
    return text
