"""
Tipos y utilidades puras para el pipeline exports -> Strapi.

Se mantienen libres de I/O para poder testearlos fácilmente.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional

Record = Mapping[str, Any]


class Outcome(str, Enum):
    """Resultado de procesar un registro."""

    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class MatchingKey:
    """Campo + valor usados para buscar la contraparte remota de un registro."""

    field: str
    value: Any


@dataclass(frozen=True)
class RecordResult:
    """
    Resultado tipado por registro.

    - outcome: created/updated/skipped/failed
    - error: detalle del error (solo si outcome == failed)
    - remote_id: id remoto afectado, si se conoce
    """

    collection: str
    label: str
    outcome: Outcome
    error: Optional[str] = None
    remote_id: Any = None

    @property
    def ok(self) -> bool:
        return self.outcome is not Outcome.FAILED

    @classmethod
    def success(cls, collection: str, label: str, outcome: Outcome, remote_id: Any = None) -> "RecordResult":
        if outcome is Outcome.FAILED:
            raise ValueError("Use RecordResult.failure para outcomes fallidos")
        return cls(collection=collection, label=label, outcome=outcome, remote_id=remote_id)

    @classmethod
    def failure(cls, collection: str, label: str, error: str, remote_id: Any = None) -> "RecordResult":
        return cls(collection=collection, label=label, outcome=Outcome.FAILED, error=error, remote_id=remote_id)


@dataclass
class SyncReport:
    """Agregado de una corrida; un RecordResult por registro procesado."""

    dry_run: bool = False
    results: list[RecordResult] = field(default_factory=list)

    def extend(self, results: list[RecordResult]) -> None:
        self.results.extend(results)

    @property
    def counts(self) -> dict[str, int]:
        c = Counter(r.outcome for r in self.results)
        return {o.value: c.get(o, 0) for o in Outcome}

    def counts_for(self, collection: str) -> dict[str, int]:
        c = Counter(r.outcome for r in self.results if r.collection == collection)
        return {o.value: c.get(o, 0) for o in Outcome}

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def created(self) -> int:
        return self.counts[Outcome.CREATED.value]

    @property
    def updated(self) -> int:
        return self.counts[Outcome.UPDATED.value]

    @property
    def skipped(self) -> int:
        return self.counts[Outcome.SKIPPED.value]

    @property
    def failed(self) -> int:
        return self.counts[Outcome.FAILED.value]

    @property
    def failures(self) -> list[RecordResult]:
        return [r for r in self.results if not r.ok]

    def is_balanced(self) -> bool:
        """created + updated + skipped + failed == total procesado."""
        return self.created + self.updated + self.skipped + self.failed == self.total


def utc_now_iso() -> str:
    """Hora actual en UTC, ISO8601 con 'Z'."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")
