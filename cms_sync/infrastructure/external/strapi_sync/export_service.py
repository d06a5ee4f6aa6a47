"""
Export de contenido desde un Strapi origen hacia el directorio de exports.

Genera los mismos archivos que consume el sync:
- <colección>.json con [{"data": {...}}, ...]
- <singleton>.json con {"data": {...}}
- media.json con la metadata de archivos subidos (los binarios no se copian)
- export-summary.json con fecha, conteos, archivos y errores
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from loguru import logger

from cms_sync.shared.exceptions.sync import StrapiApiError

from .collection_config import CollectionSpec
from .exports_repository import ExportsRepository
from .strapi_client import StrapiClient, StrapiCredentials
from .types import utc_now_iso


@dataclass
class ExportResult:
    counts: dict[str, int] = field(default_factory=dict)
    files: dict[str, str] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.errors


class StrapiExporter:
    """
    Lee colecciones y singletons vía content API (populate=*) y los guarda en disco.

    Un error en una colección se loguea y se continúa con la siguiente.
    """

    def __init__(
        self,
        *,
        client: StrapiClient,
        exports: ExportsRepository,
        page_size: int = 100,
        include_media: bool = True,
    ) -> None:
        self._client = client
        self._exports = exports
        self._page_size = page_size
        self._include_media = include_media

    def run(self, collections: Sequence[CollectionSpec]) -> ExportResult:
        logger.info(f"Exportando desde {self._client.base_url} a {self._exports.exports_dir}")
        result = ExportResult()

        for spec in collections:
            try:
                if spec.is_singleton:
                    self._export_singleton(spec, result)
                else:
                    self._export_collection(spec, result)
            except StrapiApiError as e:
                logger.error(f"Error exportando '{spec.name}': {e.message}")
                result.errors[spec.name] = e.message

        if self._include_media:
            self._export_media(result)

        summary: dict[str, Any] = {"exportDate": utc_now_iso()}
        summary.update(result.counts)
        summary["files"] = dict(result.files)
        summary["errors"] = dict(result.errors)
        self._exports.write_summary(summary)

        if result.errors:
            logger.warning(
                f"Export incompleto ({len(result.errors)} con error: {', '.join(result.errors)}). "
                f"Archivos en: {self._exports.exports_dir}"
            )
        else:
            logger.success(f"Export completado. Archivos en: {self._exports.exports_dir}")
        return result

    def _export_media(self, result: ExportResult) -> None:
        try:
            files = self._client.list_upload_files()
        except StrapiApiError as e:
            logger.error(f"Error exportando media: {e.message}")
            result.errors["media"] = e.message
            return
        path = self._exports.write_media(files)
        result.files["media"] = path.name
        logger.info(f"Exportada metadata de {len(files)} archivos de media")

    def _export_collection(self, spec: CollectionSpec, result: ExportResult) -> None:
        entries = list(self._client.iter_entries(spec.name, page_size=self._page_size))
        path = self._exports.write_collection(spec, entries)
        result.counts[spec.name] = len(entries)
        result.files[spec.name] = path.name
        logger.info(f"Exportados {len(entries)} registros de {spec.name}")

    def _export_singleton(self, spec: CollectionSpec, result: ExportResult) -> None:
        entry = self._client.get_single(spec.name)
        if entry is None:
            logger.warning(f"No se encontró el singleton '{spec.name}'")
            return
        path = self._exports.write_singleton(spec, entry)
        result.files[spec.name] = path.name
        logger.info(f"Exportado {spec.name}")


def build_from_settings(settings, exports: ExportsRepository) -> StrapiExporter:
    """Construye el exporter leyendo la configuración del Strapi origen."""
    settings.validate_source()
    client = StrapiClient(
        StrapiCredentials(base_url=settings.source_base_url, token=settings.SOURCE_STRAPI_API_TOKEN),
        timeout_s=settings.HTTP_TIMEOUT_S,
    )
    return StrapiExporter(client=client, exports=exports, page_size=settings.EXPORT_PAGE_SIZE)
