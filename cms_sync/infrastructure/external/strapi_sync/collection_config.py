"""
Configuración de colecciones a sincronizar.

La idea es que aquí tengas control total de:
- nombre de la colección en la API (/api/<name>)
- tipo: colección (create-or-update por key) o singleton (siempre update)
- política de matching key
- dependencias entre colecciones (orden de procesamiento)

Este módulo no realiza I/O: solo define configuración y validación.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence

from cms_sync.shared.exceptions.sync import SyncConfigError

from .matching import KeyExtractor, no_key
from .types import Record


class CollectionKind(str, Enum):
    COLLECTION = "collection"
    SINGLETON = "singleton"


@dataclass(frozen=True)
class CollectionSpec:
    """
    Config de una colección exports -> Strapi.

    - name: identificador estable de la API (/api/<name>)
    - key_extractor: política de matching key (ignorada en singletons)
    - depends_on: colecciones que deben quedar resueltas antes
    - label_fields: campos usados para nombrar el registro en los logs
    - export_file: archivo dentro del directorio de exports
    """

    name: str
    kind: CollectionKind = CollectionKind.COLLECTION
    key_extractor: KeyExtractor = no_key
    depends_on: frozenset[str] = field(default_factory=frozenset)
    label_fields: tuple[str, ...] = ("name", "title", "slug")
    export_file: Optional[str] = None

    @property
    def is_singleton(self) -> bool:
        return self.kind is CollectionKind.SINGLETON

    @property
    def file_name(self) -> str:
        return self.export_file or f"{self.name}.json"

    def label_for(self, record: Record, index: int) -> str:
        """Nombre legible del registro para logs y resultados."""
        if self.is_singleton:
            return self.name
        for f in self.label_fields:
            value: Any = record.get(f)
            if value not in (None, ""):
                return str(value)
        return f"#{index + 1}"


def singleton(name: str, *, depends_on: Sequence[str] = (), export_file: Optional[str] = None) -> CollectionSpec:
    return CollectionSpec(
        name=name,
        kind=CollectionKind.SINGLETON,
        depends_on=frozenset(depends_on),
        export_file=export_file,
    )


def order_collections(specs: Sequence[CollectionSpec]) -> list[CollectionSpec]:
    """
    Ordena las colecciones para que cada una vaya después de sus dependencias.

    - Estable: entre colecciones independientes se respeta el orden declarado.
    - Dependencia desconocida, nombre duplicado o ciclo -> SyncConfigError.
    """
    by_name: dict[str, CollectionSpec] = {}
    for spec in specs:
        if spec.name in by_name:
            raise SyncConfigError(f"Colección duplicada: '{spec.name}'")
        by_name[spec.name] = spec

    for spec in specs:
        unknown = sorted(d for d in spec.depends_on if d not in by_name)
        if unknown:
            raise SyncConfigError(
                f"La colección '{spec.name}' depende de colecciones no declaradas: {', '.join(unknown)}"
            )

    ordered: list[CollectionSpec] = []
    done: set[str] = set()
    pending = list(specs)
    while pending:
        ready = [s for s in pending if s.depends_on <= done]
        if not ready:
            names = ", ".join(s.name for s in pending)
            raise SyncConfigError(f"Ciclo de dependencias entre colecciones: {names}")
        # Un paso a la vez para mantener el orden declarado
        nxt = ready[0]
        ordered.append(nxt)
        done.add(nxt.name)
        pending.remove(nxt)
    return ordered


def select_collections(specs: Sequence[CollectionSpec], only: Optional[Sequence[str]]) -> list[CollectionSpec]:
    """
    Filtra por nombre (flag --only). Las dependencias no se agregan implícitamente.
    """
    if not only:
        return list(specs)
    known = {s.name for s in specs}
    unknown = sorted(set(only) - known)
    if unknown:
        raise SyncConfigError(f"Colecciones desconocidas: {', '.join(unknown)}")
    wanted = set(only)
    return [s for s in specs if s.name in wanted]
