"""
CLI: exports locales <-> Strapi.

Uso recomendado:
  - Ejecutar como job puntual (migraciones, sync a Strapi Cloud).
  - Primero `export` desde la instancia origen, luego `sync` hacia el destino.

Variables de entorno (ver cms_sync.core.config.Settings):
  - STRAPI_URL, STRAPI_API_TOKEN (sync)
  - SOURCE_STRAPI_URL, SOURCE_STRAPI_API_TOKEN (export)
  - SYNC_EXPORTS_DIR, SYNC_UPDATE_EXISTING, SYNC_DRY_RUN, HTTP_TIMEOUT_S

Ejecución:
  cms-sync export
  cms-sync sync --dry-run
  cms-sync sync --no-update-existing --only categories,authors

Códigos de salida:
  0 corrida completa (aunque haya registros fallidos)
  1 exports inexistentes o ilegibles
  2 error de configuración (variables faltantes o con valores inválidos)
  3 export incompleto (alguna colección o la media falló)
  4 no se puede escribir el directorio de exports
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

from loguru import logger

from cms_sync.core.config import Settings, load_settings
from cms_sync.core.log_config import configure_logging
from cms_sync.infrastructure.external.strapi_sync import export_service, sync_service
from cms_sync.infrastructure.external.strapi_sync.collection_mappings import get_default_collections
from cms_sync.infrastructure.external.strapi_sync.exports_repository import ExportsRepository
from cms_sync.shared.exceptions.sync import (
    ExportsNotFoundError,
    ExportsReadError,
    ExportsWriteError,
    SyncConfigError,
)

EXIT_OK = 0
EXIT_EXPORTS_MISSING = 1
EXIT_CONFIG_ERROR = 2
EXIT_EXPORT_INCOMPLETE = 3
EXIT_EXPORTS_UNWRITABLE = 4


def _csv_list(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--exports-dir",
        type=Path,
        default=None,
        help="Directorio de exports (default: SYNC_EXPORTS_DIR).",
    )

    parser = argparse.ArgumentParser(prog="cms-sync", description="Export/sync de contenido Strapi.")
    sub = parser.add_subparsers(dest="command", required=True)

    sync = sub.add_parser(
        "sync",
        parents=[common],
        help="Create-or-update de los exports en el Strapi destino.",
    )
    sync.add_argument(
        "--dry-run",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Solo muestra qué pasaría, sin escrituras.",
    )
    sync.add_argument(
        "--update-existing",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Actualizar registros existentes (--no-update-existing los omite).",
    )
    sync.add_argument(
        "--clean-blocks",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Eliminar metadatos del editor en campos blocks antes de escribir.",
    )
    sync.add_argument(
        "--strip-system-fields",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="No reenviar id, documentId ni timestamps.",
    )
    sync.add_argument(
        "--only",
        type=_csv_list,
        default=None,
        help="Colecciones a sincronizar, separadas por coma.",
    )

    sub.add_parser("export", parents=[common], help="Exporta el Strapi origen al directorio de exports.")
    return parser


def _run_sync(args: argparse.Namespace, settings: Settings, exports: ExportsRepository) -> int:
    service = sync_service.build_from_settings(
        settings,
        dry_run=args.dry_run,
        update_existing=args.update_existing,
        clean_blocks=args.clean_blocks,
        strip_system_fields=args.strip_system_fields,
    )
    logger.info("Iniciando sync de datos hacia Strapi...")
    report = service.run(collections=get_default_collections(), exports=exports, only=args.only)
    if not report.is_balanced():
        # No debería ocurrir: cada registro produce exactamente un resultado
        logger.error(f"Conteos inconsistentes: {report.counts} vs total={report.total}")
    return EXIT_OK


def _run_export(settings: Settings, exports: ExportsRepository) -> int:
    exporter = export_service.build_from_settings(settings, exports)
    result = exporter.run(get_default_collections())
    return EXIT_OK if result.complete else EXIT_EXPORT_INCOMPLETE


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
        configure_logging(settings.LOG_LEVEL, settings.LOG_FILE)
        exports = ExportsRepository(args.exports_dir or Path(settings.SYNC_EXPORTS_DIR))

        if args.command == "export":
            return _run_export(settings, exports)
        return _run_sync(args, settings, exports)
    except (ExportsNotFoundError, ExportsReadError) as e:
        logger.error(e.message)
        logger.info('Ejecuta "cms-sync export" primero para generar los exports.')
        return EXIT_EXPORTS_MISSING
    except ExportsWriteError as e:
        logger.error(e.message)
        return EXIT_EXPORTS_UNWRITABLE
    except SyncConfigError as e:
        logger.error(f"Configuración inválida: {e.message}")
        return EXIT_CONFIG_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
