"""
Excepciones relacionadas con el export/sync de contenido.
"""
from pathlib import Path
from typing import Any, Optional

from cms_sync.shared.exceptions.base import AppException


class SyncConfigError(AppException):
    """Error de configuración (variables faltantes, grafo de colecciones inválido)."""

    def __init__(self, message: str, setting: Optional[str] = None):
        details = {"setting": setting} if setting else None
        super().__init__(
            message=message,
            error_code="SYNC_CONFIG_ERROR",
            details=details
        )


class ExportsNotFoundError(AppException):
    """No existe el directorio de exports: no hay nada que reconciliar."""

    def __init__(self, exports_dir: Path):
        super().__init__(
            message=f"Directorio de exports no encontrado: {exports_dir}",
            error_code="EXPORTS_NOT_FOUND",
            details={"exports_dir": str(exports_dir)}
        )


class ExportsReadError(AppException):
    """Un archivo de export existe pero no se puede leer o tiene forma inválida."""

    def __init__(self, path: Path, reason: str):
        super().__init__(
            message=f"No se pudo leer {path}: {reason}",
            error_code="EXPORTS_UNREADABLE",
            details={"path": str(path), "reason": reason}
        )


class StrapiApiError(AppException):
    """Error de integración con la API de contenido de Strapi."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
    ):
        super().__init__(
            message=message,
            error_code="STRAPI_API_ERROR",
            details={"status_code": status_code, "body": body}
        )
        self.status_code = status_code


class ExportsWriteError(AppException):
    """No se puede escribir en el directorio de exports."""

    def __init__(self, path: Path, reason: str):
        super().__init__(
            message=f"No se pudo escribir {path}: {reason}",
            error_code="EXPORTS_UNWRITABLE",
            details={"path": str(path), "reason": reason}
        )
