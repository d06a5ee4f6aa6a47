"""
Lectura/escritura del directorio de exports (JSON).

Formato (simétrico con la API de Strapi):
- colección: [{"data": {...}}, ...]
- singleton: {"data": {...}}
- media.json: metadata de archivos subidos (lista tal cual la devuelve Strapi)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from cms_sync.shared.exceptions.sync import ExportsNotFoundError, ExportsReadError, ExportsWriteError

from .collection_config import CollectionSpec
from .types import Record

SUMMARY_FILE = "export-summary.json"
MEDIA_FILE = "media.json"


def _unwrap(item: Any, path: Path, index: Optional[int] = None) -> Record:
    where = f"item {index}" if index is not None else "raíz"
    if not isinstance(item, dict):
        raise ExportsReadError(path, f"{where}: se esperaba un objeto, se obtuvo {type(item).__name__}")
    if "data" in item:
        data = item["data"]
        if not isinstance(data, dict):
            raise ExportsReadError(path, f"{where}: 'data' debe ser un objeto")
        return data
    # Registros "pelados" (sin envelope) se aceptan tal cual
    return item


class ExportsRepository:
    """
    Acceso al directorio de exports.

    Uso:
        repo = ExportsRepository(Path("exports"))
        repo.ensure_available()
        records = repo.load_records(spec)
    """

    def __init__(self, exports_dir: Path) -> None:
        self._dir = Path(exports_dir)

    @property
    def exports_dir(self) -> Path:
        return self._dir

    def ensure_available(self) -> None:
        """Precondición fatal: sin directorio de exports no hay nada que reconciliar."""
        if not self._dir.is_dir():
            raise ExportsNotFoundError(self._dir)

    def path_for(self, spec: CollectionSpec) -> Path:
        return self._dir / spec.file_name

    def load_records(self, spec: CollectionSpec) -> Optional[list[Record]]:
        """
        Carga los registros de una colección.

        - Archivo inexistente -> None (la colección se omite).
        - JSON inválido o forma inesperada -> ExportsReadError.
        - Singleton -> lista de un elemento.
        """
        path = self.path_for(spec)
        if not path.exists():
            logger.debug(f"Sin export para '{spec.name}' ({path})")
            return None

        raw = self._read_json(path)

        if spec.is_singleton:
            return [_unwrap(raw, path)]

        if not isinstance(raw, list):
            raise ExportsReadError(path, "se esperaba una lista de registros")
        return [_unwrap(item, path, i) for i, item in enumerate(raw)]

    def write_collection(self, spec: CollectionSpec, entries: list[dict[str, Any]]) -> Path:
        path = self.path_for(spec)
        self._write_json(path, [{"data": e} for e in entries])
        return path

    def write_singleton(self, spec: CollectionSpec, entry: dict[str, Any]) -> Path:
        path = self.path_for(spec)
        self._write_json(path, {"data": entry})
        return path

    def write_media(self, files: list[dict[str, Any]]) -> Path:
        path = self._dir / MEDIA_FILE
        self._write_json(path, files)
        return path

    def write_summary(self, summary: dict[str, Any]) -> Path:
        path = self._dir / SUMMARY_FILE
        self._write_json(path, summary)
        return path

    @staticmethod
    def _read_json(path: Path) -> Any:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise ExportsReadError(path, str(e)) from e
        except json.JSONDecodeError as e:
            raise ExportsReadError(path, f"JSON inválido ({e.msg}, línea {e.lineno})") from e

    def _write_json(self, path: Path, payload: Any) -> None:
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise ExportsWriteError(path, str(e)) from e
