"""
Servicio de sincronización exports -> Strapi.

Diseño (resumen):
- Valida precondiciones (directorio de exports) y carga todos los exports antes de tocar la red
- Ordena las colecciones según depends_on
- Por registro: matching key -> lookup remoto -> create / update / skip
- Singletons: siempre PUT al endpoint fijo
- Cada registro produce exactamente un RecordResult; se agregan en un SyncReport

Estrategia de idempotencia:
- Lookup por matching key antes de crear; con update_existing=True una segunda corrida
  solo produce updates (nunca duplica).
- Fallos de escritura se registran como failed y el batch continúa (sin retry, sin rollback).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from loguru import logger

from cms_sync.shared.exceptions.sync import StrapiApiError

from .collection_config import CollectionSpec, order_collections, select_collections
from .exports_repository import ExportsRepository
from .payload_cleaning import prepare_payload
from .strapi_client import StrapiClient, StrapiCredentials
from .types import Outcome, Record, RecordResult, SyncReport


@dataclass(frozen=True)
class SyncOptions:
    update_existing: bool = True
    dry_run: bool = False
    clean_blocks: bool = False
    strip_system_fields: bool = False
    id_field: str = "id"


def _log_result(result: RecordResult, dry_run: bool) -> None:
    where = f"[{result.collection}] {result.label}"
    if result.outcome is Outcome.FAILED:
        logger.error(f"  Error: {where} -> {result.error}")
    elif result.outcome is Outcome.SKIPPED:
        logger.warning(f"  Omitido (ya existe): {where}")
    elif dry_run:
        verb = "Se crearía" if result.outcome is Outcome.CREATED else "Se actualizaría"
        logger.info(f"  {verb}: {where}")
    else:
        verb = "Creado" if result.outcome is Outcome.CREATED else "Actualizado"
        logger.success(f"  {verb}: {where}")


def log_summary(report: SyncReport) -> None:
    """Resumen final de la corrida (una línea por contador)."""
    c = report.counts
    logger.info("=" * 50)
    logger.info("Resumen del sync:")
    logger.info(f"   Creados:      {c['created']}")
    logger.info(f"   Actualizados: {c['updated']}")
    logger.info(f"   Omitidos:     {c['skipped']}")
    logger.info(f"   Fallidos:     {c['failed']}")
    logger.info(f"   Total:        {report.total}")
    logger.info("=" * 50)
    if report.dry_run:
        logger.warning("Dry run: no se realizó ningún cambio en el destino.")


class StrapiSyncService:
    """
    Orquestador del sync para un conjunto de colecciones.
    """

    def __init__(self, *, client: StrapiClient, options: Optional[SyncOptions] = None) -> None:
        self._client = client
        self._options = options or SyncOptions()

    @property
    def options(self) -> SyncOptions:
        return self._options

    def run(
        self,
        *,
        collections: Sequence[CollectionSpec],
        exports: ExportsRepository,
        only: Optional[Sequence[str]] = None,
    ) -> SyncReport:
        """
        Ejecuta una corrida completa.

        Levanta ExportsNotFoundError/ExportsReadError antes de cualquier llamada de red.
        """
        exports.ensure_available()

        ordered = order_collections(collections)
        selected = select_collections(ordered, only)
        selected_names = {s.name for s in selected}
        for spec in selected:
            missing = sorted(spec.depends_on - selected_names)
            if missing:
                logger.warning(
                    f"'{spec.name}' depende de {', '.join(missing)}, que no se sincronizan en esta corrida"
                )

        # Cargar todo primero: un export ilegible aborta antes de escribir nada
        batches: list[tuple[CollectionSpec, list[Record]]] = []
        for spec in selected:
            records = exports.load_records(spec)
            if records is None:
                continue
            batches.append((spec, records))

        logger.info(f"Destino: {self._client.base_url}")
        logger.info(f"Actualizar existentes: {'Sí' if self._options.update_existing else 'No (omitir)'}")
        logger.info(f"Dry run: {'Sí' if self._options.dry_run else 'No'}")

        report = SyncReport(dry_run=self._options.dry_run)
        for spec, records in batches:
            logger.info(f"Sincronizando {spec.name} ({len(records)} registros)...")
            if spec.is_singleton:
                report.extend([self.sync_singleton(spec, r) for r in records])
            else:
                report.extend(self.sync_collection(spec, records))

        log_summary(report)
        return report

    def sync_collection(self, spec: CollectionSpec, records: Sequence[Record]) -> list[RecordResult]:
        """Procesa los registros en orden de entrada, uno a la vez."""
        return [self.reconcile_record(spec, record, index) for index, record in enumerate(records)]

    def reconcile_record(self, spec: CollectionSpec, record: Record, index: int = 0) -> RecordResult:
        """
        Create-or-update de un registro.

        1. matching key (sin key -> se crea)
        2. lookup remoto (fallos de red -> "no existe")
        3. existe: skip o update según update_existing
        4. no existe: create
        En dry run se hace el lookup pero ninguna escritura.
        """
        label = spec.label_for(record, index)
        opts = self._options

        key = spec.key_extractor(record)
        existing = self._client.find_first(spec.name, key) if key is not None else None

        if existing is not None:
            remote_id = existing.get(opts.id_field)
            if not opts.update_existing:
                result = RecordResult.success(spec.name, label, Outcome.SKIPPED, remote_id=remote_id)
            elif remote_id is None:
                result = RecordResult.failure(
                    spec.name, label, f"el registro remoto no tiene '{opts.id_field}'"
                )
            elif opts.dry_run:
                result = RecordResult.success(spec.name, label, Outcome.UPDATED, remote_id=remote_id)
            else:
                result = self._write(
                    spec, label, Outcome.UPDATED, remote_id,
                    lambda payload: self._client.update(spec.name, remote_id, payload),
                    record,
                )
        elif opts.dry_run:
            result = RecordResult.success(spec.name, label, Outcome.CREATED)
        else:
            result = self._write(
                spec, label, Outcome.CREATED, None,
                lambda payload: self._client.create(spec.name, payload),
                record,
            )

        _log_result(result, opts.dry_run)
        return result

    def sync_singleton(self, spec: CollectionSpec, record: Record) -> RecordResult:
        """Singletons: sin key ni lookup, siempre update al endpoint fijo."""
        if self._options.dry_run:
            result = RecordResult.success(spec.name, spec.name, Outcome.UPDATED)
        else:
            result = self._write(
                spec, spec.name, Outcome.UPDATED, None,
                lambda payload: self._client.update_single(spec.name, payload),
                record,
            )
        _log_result(result, self._options.dry_run)
        return result

    def _write(
        self,
        spec: CollectionSpec,
        label: str,
        outcome: Outcome,
        remote_id: Any,
        call: Callable[[dict[str, Any]], dict[str, Any]],
        record: Record,
    ) -> RecordResult:
        payload = prepare_payload(
            record,
            clean_blocks_fields=self._options.clean_blocks,
            strip_system_fields=self._options.strip_system_fields,
        )
        try:
            saved: dict[str, Any] = call(payload)
        except StrapiApiError as e:
            return RecordResult.failure(spec.name, label, e.message, remote_id=remote_id)
        if remote_id is None:
            remote_id = saved.get(self._options.id_field)
        return RecordResult.success(spec.name, label, outcome, remote_id=remote_id)


def build_from_settings(settings, **overrides: Any) -> StrapiSyncService:
    """
    Constructor "oficial" del servicio a partir de Settings.

    `overrides` permite que la CLI pise opciones de SyncOptions.
    """
    settings.validate_target()
    client = StrapiClient(
        StrapiCredentials(base_url=settings.target_base_url, token=settings.STRAPI_API_TOKEN),
        timeout_s=settings.HTTP_TIMEOUT_S,
    )
    values: dict[str, Any] = {
        "update_existing": settings.SYNC_UPDATE_EXISTING,
        "dry_run": settings.SYNC_DRY_RUN,
        "clean_blocks": settings.SYNC_CLEAN_BLOCKS,
        "strip_system_fields": settings.SYNC_STRIP_SYSTEM_FIELDS,
        "id_field": settings.STRAPI_ID_FIELD,
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    return StrapiSyncService(client=client, options=SyncOptions(**values))
