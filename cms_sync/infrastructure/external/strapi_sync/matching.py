"""
Resolución de "matching keys": qué campo identifica a un registro remoto.

Cada colección declara su propia política como una función
`KeyExtractor(record) -> Optional[MatchingKey]`.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from .types import MatchingKey, Record

KeyExtractor = Callable[[Record], Optional[MatchingKey]]


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def resolve_matching_key(record: Record, candidates: Sequence[str]) -> Optional[MatchingKey]:
    """
    Retorna el primer (campo, valor) presente y no vacío según la prioridad.

    Pura: no muta el registro. Retorna None si ningún candidato aplica.
    """
    for name in candidates:
        if name not in record:
            continue
        value = record[name]
        if _is_empty(value):
            continue
        return MatchingKey(field=name, value=value)
    return None


def field_priority(*candidates: str) -> KeyExtractor:
    """
    Construye un KeyExtractor a partir de una lista priorizada de campos.

    Ejemplo: field_priority("slug", "title") busca por slug si existe,
    si no por title. Nunca se prueban ambos para el mismo registro.
    """
    if not candidates:
        raise ValueError("field_priority requiere al menos un campo")
    ordered = tuple(candidates)

    def extract(record: Record) -> Optional[MatchingKey]:
        return resolve_matching_key(record, ordered)

    extract.candidates = ordered  # type: ignore[attr-defined]
    return extract


def no_key(record: Record) -> Optional[MatchingKey]:
    """Política para singletons: nunca hay matching key."""
    return None
