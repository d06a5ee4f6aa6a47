"""
Cliente mínimo de la API de contenido de Strapi (sin SDKs externos).

Requisitos cubiertos:
- requests
- bearer token
- lookup por filtro (filters[<field>][$eq]=<value>)
- create / update / update de singletons
- paginación por page/pageSize (para export)

Sin reintentos: cada llamada se hace una sola vez y el llamador decide.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

import requests
from loguru import logger

from cms_sync.shared.exceptions.sync import StrapiApiError

from .types import MatchingKey


@dataclass(frozen=True)
class StrapiCredentials:
    base_url: str
    token: str


def build_eq_filter(key: MatchingKey) -> dict[str, Any]:
    """
    Query params para buscar por igualdad exacta.

    requests se encarga del urlencode del valor (y de los corchetes).
    """
    return {f"filters[{key.field}][$eq]": key.value}


def _error_message(body: Any) -> str:
    # Strapi responde {"error": {"status", "name", "message", "details"}}
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
    if body in (None, ""):
        return "sin cuerpo de respuesta"
    return str(body)[:500]


class StrapiClient:
    """
    Cliente HTTP de Strapi.

    Importante:
    - Los métodos de escritura levantan StrapiApiError ante non-2xx o error de transporte.
    - find_first NO levanta: degrada a None (política "si no lo encuentro, lo creo").
    """

    def __init__(
        self,
        credentials: StrapiCredentials,
        *,
        session: Optional[requests.Session] = None,
        timeout_s: float = 30.0,
    ) -> None:
        self._creds = credentials
        self._base_url = credentials.base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    # ------------------------------------------------------------------
    # Lecturas
    # ------------------------------------------------------------------

    def find_first(self, collection: str, key: MatchingKey) -> Optional[dict[str, Any]]:
        """
        Busca el primer registro remoto cuyo key.field == key.value.

        - Varios matches: gana el primero (se loguea warning, la unicidad es un supuesto).
        - Error de red/decodificación: se trata como "no encontrado".
        """
        try:
            payload = self._request_json("GET", collection, params=build_eq_filter(key))
        except StrapiApiError as e:
            logger.warning(
                f"Lookup falló en '{collection}' ({key.field}={key.value!r}), se asume inexistente: {e.message}"
            )
            return None

        items = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(items, list) or not items:
            return None
        if len(items) > 1:
            logger.warning(
                f"{len(items)} registros en '{collection}' con {key.field}={key.value!r}; se usa el primero"
            )
        first = items[0]
        return first if isinstance(first, dict) else None

    def get_single(self, name: str, *, populate: str = "*") -> Optional[dict[str, Any]]:
        """
        Lee un singleton. Retorna None si no existe (404).
        """
        try:
            payload = self._request_json("GET", name, params={"populate": populate})
        except StrapiApiError as e:
            if e.status_code == 404:
                return None
            raise
        data = payload.get("data") if isinstance(payload, dict) else None
        return data if isinstance(data, dict) else None

    def list_upload_files(self) -> list[dict[str, Any]]:
        """
        GET /api/upload/files: metadata de los archivos subidos.

        El plugin de upload responde una lista sin envelope.
        """
        payload = self._request_json("GET", "upload/files")
        files = payload.get("data")
        if not isinstance(files, list):
            raise StrapiApiError("Strapi GET /api/upload/files no devolvió una lista", body=payload)
        return [f for f in files if isinstance(f, dict)]

    def iter_entries(
        self,
        collection: str,
        *,
        page_size: int = 100,
        populate: str = "*",
    ) -> Iterable[dict[str, Any]]:
        """
        Itera todas las entradas de una colección siguiendo meta.pagination.
        """
        page = 1
        while True:
            payload = self._request_json(
                "GET",
                collection,
                params={
                    "populate": populate,
                    "pagination[page]": page,
                    "pagination[pageSize]": page_size,
                },
            )
            items = payload.get("data") or []
            for item in items:
                yield item

            pagination = (payload.get("meta") or {}).get("pagination") or {}
            page_count = pagination.get("pageCount")
            if not items or page_count is None or page >= int(page_count):
                break
            page += 1

    # ------------------------------------------------------------------
    # Escrituras
    # ------------------------------------------------------------------

    def create(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """POST /api/<collection> con {"data": ...}."""
        return self._unwrap(self._request_json("POST", collection, json_body={"data": data}, strict=False))

    def update(self, collection: str, remote_id: Any, data: dict[str, Any]) -> dict[str, Any]:
        """PUT /api/<collection>/<id> con {"data": ...} (reemplazo)."""
        return self._unwrap(
            self._request_json("PUT", f"{collection}/{remote_id}", json_body={"data": data}, strict=False)
        )

    def update_single(self, name: str, data: dict[str, Any]) -> dict[str, Any]:
        """PUT /api/<singleton> con {"data": ...}; sin segmento de id."""
        return self._unwrap(self._request_json("PUT", name, json_body={"data": data}, strict=False))

    @staticmethod
    def _unwrap(payload: dict[str, Any]) -> dict[str, Any]:
        data = payload.get("data") if isinstance(payload, dict) else None
        return data if isinstance(data, dict) else {}

    def _request_json(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[dict[str, Any]] = None,
        strict: bool = True,
    ) -> dict[str, Any]:
        """
        Request HTTP única (sin backoff).

        - Error de transporte -> StrapiApiError(status_code=None)
        - non-2xx -> StrapiApiError con el cuerpo de la respuesta
        - 2xx con cuerpo no JSON -> error si strict, {} si no
        """
        url = f"{self._base_url}/api/{path}"
        headers = {
            "Authorization": f"Bearer {self._creds.token}",
            "Content-Type": "application/json",
        }

        try:
            resp = self._session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self._timeout_s,
            )
        except requests.RequestException as e:
            raise StrapiApiError(f"Strapi {method} /api/{path} error de red: {e}") from e

        if not 200 <= resp.status_code < 300:
            try:
                body: Any = resp.json()
            except ValueError:
                body = resp.text
            raise StrapiApiError(
                f"Strapi {method} /api/{path} falló {resp.status_code}: {_error_message(body)}",
                status_code=resp.status_code,
                body=body,
            )

        if not resp.content:
            return {}
        try:
            payload = resp.json()
        except ValueError as e:
            if strict:
                raise StrapiApiError(
                    f"Strapi {method} /api/{path} devolvió JSON inválido",
                    status_code=resp.status_code,
                    body=resp.text,
                ) from e
            return {}
        return payload if isinstance(payload, dict) else {"data": payload}
