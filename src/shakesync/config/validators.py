"""
Funções de validação reutilizáveis.

Funções puras usadas pelos modelos de configuração para garantir a
integridade dos dados antes da utilização.
"""

from typing import Any, Optional, Set
from pathlib import Path

from shakesync.core.exceptions import ValidationException


def validate_positive_int(value: int, field_name: str, min_value: int = 1) -> None:
    """
    Valida se um número inteiro é maior ou igual a um mínimo.

    Raises:
        ValidationException: Se o valor não for inteiro ou for menor que min_value.
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationException(
            f"{field_name} deve ser um número inteiro.",
            details={"value": value, "type": type(value).__name__}
        )

    if value < min_value:
        raise ValidationException(
            f"{field_name} deve ser >= {min_value}",
            details={"value": value, "min_value": min_value}
        )


def validate_positive_float(value: float, field_name: str, min_value: float = 0.0) -> None:
    """Valida se um número é estritamente maior que um mínimo."""
    if not isinstance(value, (float, int)) or isinstance(value, bool):
        raise ValidationException(
            f"{field_name} deve ser um número.",
            details={"value": value, "type": type(value).__name__}
        )

    if value <= min_value:
        raise ValidationException(
            f"{field_name} deve ser > {min_value}",
            details={"value": value, "min_value": min_value}
        )


def validate_choice(value: str, valid_choices: Set[str], field_name: str) -> None:
    """
    Valida se um valor único está dentro das opções permitidas.

    Args:
        value: Valor a validar.
        valid_choices: Conjunto de escolhas permitidas.
        field_name: Nome do campo.
    """
    if value not in valid_choices:
        raise ValidationException(
            f"{field_name} inválido: {value}. Use um dos: {', '.join(sorted(valid_choices))}",
            details={"value": value, "valid_choices": sorted(valid_choices)}
        )


def validate_url(value: Optional[str], field_name: str) -> None:
    """Valida se a URL informada usa http ou https."""
    if value is None:
        return
    if not value.startswith(("http://", "https://")):
        raise ValidationException(
            f"{field_name} deve começar com http:// ou https://",
            details={"value": value}
        )


def validate_timezone(value: Optional[str], field_name: str) -> None:
    """Valida um identificador de fuso IANA (ex.: America/Sao_Paulo)."""
    if value is None:
        return
    from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValidationException(
            f"{field_name} inválido: {value}",
            details={"value": value},
            cause=e,
        ) from e


def ensure_path_exists(path: Optional[str | Path]) -> Optional[Path]:
    """
    Garante que o diretório pai de um caminho exista.
    Se o caminho não tiver extensão, é tratado como diretório e criado.

    Returns:
        Path: Objeto Path resolvido ou None se path for None.
    """
    if path is not None:
        resolved = Path(path).expanduser().resolve()
        if not resolved.suffix:
            resolved.mkdir(parents=True, exist_ok=True)
        else:
            resolved.parent.mkdir(parents=True, exist_ok=True)
        return resolved
    return None


def validate_type(value: Any, expected_type: type | tuple, field_name: str) -> None:
    """
    Valida estritamente se o valor corresponde ao tipo esperado.
    Não aceita conversão implícita (ex: "true" para bool).

    Raises:
        ValidationException: Se o tipo estiver incorreto.
    """
    if value is None:
        return  # Optionals são tratados pelo default do dataclass

    expected = expected_type if isinstance(expected_type, tuple) else (expected_type,)
    if bool not in expected and isinstance(value, bool):
        raise ValidationException(
            f"{field_name} não pode ser booleano.",
            details={"value": value, "got": "bool"}
        )

    if not isinstance(value, expected):
        names = "/".join(t.__name__ for t in expected)
        raise ValidationException(
            f"{field_name} deve ser do tipo {names}.",
            details={"value": value, "expected": names, "got": type(value).__name__}
        )
