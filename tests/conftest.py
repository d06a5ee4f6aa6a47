"""
Fixtures compartidas: un Strapi en memoria detrás de una sesión requests falsa.
"""
from __future__ import annotations

import json as jsonlib
from typing import Any, Optional

import pytest
import requests

from cms_sync.infrastructure.external.strapi_sync.strapi_client import StrapiClient, StrapiCredentials
from cms_sync.infrastructure.external.strapi_sync.sync_service import StrapiSyncService, SyncOptions

BASE_URL = "https://cms.test"


class _FakeResponse:
    def __init__(self, status_code: int, payload: Any = None, text: Optional[str] = None) -> None:
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = jsonlib.dumps(payload) if payload is not None else ""
        self.text = text
        self.content = text.encode("utf-8")
        self.headers: dict[str, str] = {}

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


def _error(status: int, message: str) -> _FakeResponse:
    return _FakeResponse(status, {"data": None, "error": {"status": status, "name": "Error", "message": message}})


class FakeStrapiSession:
    """
    Strapi mínimo en memoria.

    - store: colecciones -> lista de entradas (con id autoincremental)
    - singles: singletons -> entrada
    - fail_writes: valores de name/title/slug cuyas escrituras responden 500
    - fail_lookups: los GET levantan ConnectionError
    - media_files: respuesta de /api/upload/files (None -> 404)
    """

    def __init__(self, singletons: tuple[str, ...] = ("global", "about", "home")) -> None:
        self.store: dict[str, list[dict[str, Any]]] = {}
        self.singles: dict[str, dict[str, Any]] = {}
        self.singleton_names = set(singletons)
        self.calls: list[dict[str, Any]] = []
        self.fail_writes: set[Any] = set()
        self.fail_lookups = False
        self.media_files: Optional[list[dict[str, Any]]] = []
        self._next_id = 1

    @property
    def mutating_calls(self) -> list[dict[str, Any]]:
        return [c for c in self.calls if c["method"] != "GET"]

    @property
    def lookups(self) -> list[dict[str, Any]]:
        return [c for c in self.calls if c["method"] == "GET"]

    def seed(self, collection: str, **fields: Any) -> dict[str, Any]:
        entry = {**fields, "id": self._next_id}
        self._next_id += 1
        self.store.setdefault(collection, []).append(entry)
        return entry

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        self.calls.append(
            {"method": method, "url": url, "params": params, "json": json, "headers": headers, "timeout": timeout}
        )
        path = url.split("/api/", 1)[1]
        parts = path.split("/")
        name = parts[0]

        if method == "GET" and path == "upload/files":
            if self.media_files is None:
                return _error(404, "Not Found")
            return _FakeResponse(200, list(self.media_files))

        if method == "GET":
            return self._get(name, params or {})

        data = (json or {}).get("data") or {}
        if any(data.get(f) in self.fail_writes for f in ("name", "title", "slug")):
            return _error(500, "Internal Server Error")

        if method == "POST":
            entry = {**data, "id": self._next_id}
            self._next_id += 1
            self.store.setdefault(name, []).append(entry)
            return _FakeResponse(201, {"data": entry, "meta": {}})

        if method == "PUT" and len(parts) == 1:
            if name not in self.singleton_names:
                return _error(405, "Method Not Allowed")
            self.singles[name] = dict(data)
            return _FakeResponse(200, {"data": self.singles[name], "meta": {}})

        if method == "PUT":
            items = self.store.get(name, [])
            for i, item in enumerate(items):
                if str(item.get("id")) == parts[1]:
                    items[i] = {**data, "id": item["id"]}
                    return _FakeResponse(200, {"data": items[i], "meta": {}})
            return _error(404, "Not Found")

        return _error(405, "Method Not Allowed")

    def _get(self, name: str, params: dict[str, Any]) -> _FakeResponse:
        if self.fail_lookups:
            raise requests.ConnectionError("connection refused")

        if name in self.singleton_names:
            if name not in self.singles:
                return _error(404, "Not Found")
            return _FakeResponse(200, {"data": self.singles[name], "meta": {}})

        items = list(self.store.get(name, []))
        for key, value in params.items():
            if key.startswith("filters["):
                field = key[len("filters["):].split("]", 1)[0]
                items = [i for i in items if i.get(field) == value]

        page = int(params.get("pagination[page]", 1))
        page_size = int(params.get("pagination[pageSize]", 25))
        page_count = max(1, -(-len(items) // page_size))
        chunk = items[(page - 1) * page_size: page * page_size]
        return _FakeResponse(
            200,
            {
                "data": chunk,
                "meta": {
                    "pagination": {
                        "page": page,
                        "pageSize": page_size,
                        "pageCount": page_count,
                        "total": len(items),
                    }
                },
            },
        )


@pytest.fixture
def fake_strapi() -> FakeStrapiSession:
    return FakeStrapiSession()


@pytest.fixture
def client(fake_strapi) -> StrapiClient:
    return StrapiClient(StrapiCredentials(base_url=BASE_URL, token="test-token"), session=fake_strapi, timeout_s=5)


@pytest.fixture
def make_service(client):
    """Fábrica de StrapiSyncService con opciones por test."""

    def _make(**options: Any) -> StrapiSyncService:
        return StrapiSyncService(client=client, options=SyncOptions(**options))

    return _make


@pytest.fixture
def write_exports(tmp_path):
    """Escribe archivos de export en tmp_path/exports y retorna el directorio."""
    exports_dir = tmp_path / "exports"

    def _write(**files: Any):
        exports_dir.mkdir(exist_ok=True)
        for name, payload in files.items():
            (exports_dir / f"{name}.json").write_text(jsonlib.dumps(payload), encoding="utf-8")
        return exports_dir

    return _write
