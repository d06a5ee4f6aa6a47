"""
Configuracion central de cms-sync.
Gestiona variables de entorno (o .env) para el destino Strapi, el origen
de export y las opciones del sync.
"""
from pydantic import Field, ValidationError, computed_field
from pydantic_settings import BaseSettings

from cms_sync.shared.exceptions.sync import SyncConfigError


class Settings(BaseSettings):
    """
    Clase de configuracion del sync.
    Lee variables de entorno y proporciona valores por defecto.

    Destino vs origen:
    - STRAPI_URL / STRAPI_API_TOKEN: instancia donde se escribe (sync)
    - SOURCE_STRAPI_URL / SOURCE_STRAPI_API_TOKEN: instancia de donde se lee (export)
    """

    APP_NAME: str = Field(default="cms-sync")

    # Destino (Strapi Cloud u otra instancia)
    STRAPI_URL: str = Field(default="")
    STRAPI_API_TOKEN: str = Field(default="")
    # Campo del registro remoto usado en PUT /api/<name>/<id>
    STRAPI_ID_FIELD: str = Field(default="id")

    # Origen del export
    SOURCE_STRAPI_URL: str = Field(default="")
    SOURCE_STRAPI_API_TOKEN: str = Field(default="")
    EXPORT_PAGE_SIZE: int = Field(default=100)

    # Opciones del sync
    SYNC_EXPORTS_DIR: str = Field(default="exports")
    SYNC_UPDATE_EXISTING: bool = Field(default=True)
    SYNC_DRY_RUN: bool = Field(default=False)
    SYNC_CLEAN_BLOCKS: bool = Field(default=False)
    SYNC_STRIP_SYSTEM_FIELDS: bool = Field(default=False)

    # HTTP: sin timeout un bulk migration puede quedar colgado indefinidamente
    HTTP_TIMEOUT_S: float = Field(default=30.0)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="")

    @computed_field
    @property
    def target_base_url(self) -> str:
        """URL del destino sin '/' final."""
        return self.STRAPI_URL.rstrip("/")

    @computed_field
    @property
    def source_base_url(self) -> str:
        """URL del origen sin '/' final."""
        return self.SOURCE_STRAPI_URL.rstrip("/")

    def validate_target(self) -> None:
        """Falla temprano si falta la configuracion del destino."""
        _require(self.STRAPI_URL, "STRAPI_URL")
        _require(self.STRAPI_API_TOKEN, "STRAPI_API_TOKEN")

    def validate_source(self) -> None:
        """Falla temprano si falta la configuracion del origen."""
        _require(self.SOURCE_STRAPI_URL, "SOURCE_STRAPI_URL")
        _require(self.SOURCE_STRAPI_API_TOKEN, "SOURCE_STRAPI_API_TOKEN")

    class Config:
        """Configuracion de Pydantic."""
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignorar campos extra del .env


def _require(value: str, name: str) -> None:
    if not value:
        raise SyncConfigError(f"Falta variable de entorno obligatoria: {name}", setting=name)


def load_settings() -> Settings:
    """
    Construye Settings traduciendo errores de validación a SyncConfigError.

    Ejemplo: SYNC_DRY_RUN=maybe o HTTP_TIMEOUT_S=abc.
    """
    try:
        return Settings()
    except ValidationError as e:
        names = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        raise SyncConfigError(f"Valores inválidos en: {names}", setting=names or None) from e
