"""
Limpieza de payloads antes de escribir en Strapi.

- Bloques (rich text): se eliminan metadatos del editor que Strapi rechaza
  o que corrompen el documento (selection, operations, history, ...).
- Campos de sistema: id, documentId y timestamps que no se deben reenviar.

Todas las funciones retornan copias; nunca mutan el input.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

EDITOR_METADATA_KEYS: frozenset[str] = frozenset(
    {"selection", "operations", "history", "lastInsertedLinkPath", "marks"}
)

SYSTEM_FIELDS: frozenset[str] = frozenset(
    {"id", "documentId", "createdAt", "updatedAt", "publishedAt", "createdBy", "updatedBy"}
)


def _looks_like_blocks(value: Any) -> bool:
    # Un campo blocks es una lista de nodos con "type"
    return (
        isinstance(value, list)
        and len(value) > 0
        and all(isinstance(v, Mapping) and "type" in v for v in value)
    )


def clean_blocks(blocks: Any) -> Any:
    """
    Limpia una lista de bloques recursivamente (incluye children).

    Valores que no son listas se retornan tal cual.
    """
    if not isinstance(blocks, list):
        return blocks

    cleaned_list = []
    for block in blocks:
        if isinstance(block, Mapping):
            cleaned = {k: v for k, v in block.items() if k not in EDITOR_METADATA_KEYS}
            if isinstance(cleaned.get("children"), list):
                cleaned["children"] = clean_blocks(cleaned["children"])
            cleaned_list.append(cleaned)
        else:
            cleaned_list.append(block)
    return cleaned_list


def strip_fields(value: Any, keys: Iterable[str]) -> Any:
    """
    Elimina recursivamente las claves indicadas en mappings anidados y listas.
    """
    keyset = frozenset(keys)

    def _strip(v: Any) -> Any:
        if isinstance(v, Mapping):
            return {k: _strip(x) for k, x in v.items() if k not in keyset}
        if isinstance(v, list):
            return [_strip(x) for x in v]
        return v

    return _strip(value)


def prepare_payload(
    data: Mapping[str, Any],
    *,
    clean_blocks_fields: bool = False,
    strip_system_fields: bool = False,
) -> dict[str, Any]:
    """
    Retorna una copia de `data` lista para POST/PUT según las opciones.
    """
    payload: dict[str, Any] = dict(data)

    if clean_blocks_fields:
        payload = {k: clean_blocks(v) if _looks_like_blocks(v) else v for k, v in payload.items()}

    if strip_system_fields:
        payload = strip_fields(payload, SYSTEM_FIELDS)

    return payload
