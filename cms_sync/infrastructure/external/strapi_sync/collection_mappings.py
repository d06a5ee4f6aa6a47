"""
Colecciones del sitio (blog Strapi) y su política de matching.

Patrón sugerido:
- Una entrada por content-type; las colecciones nuevas declaran su propia key.
- Las dependencias reflejan relaciones: articles referencia categories y authors.
"""

from __future__ import annotations

from .collection_config import CollectionSpec, singleton
from .matching import field_priority


def get_default_collections() -> list[CollectionSpec]:
    """
    Layout por defecto: categories -> authors -> articles -> singletons.
    """
    return [
        CollectionSpec(
            name="categories",
            key_extractor=field_priority("name"),
        ),
        CollectionSpec(
            name="authors",
            key_extractor=field_priority("name"),
        ),
        CollectionSpec(
            name="articles",
            key_extractor=field_priority("slug", "title"),
            depends_on=frozenset({"categories", "authors"}),
            label_fields=("title", "slug"),
        ),
        singleton("global"),
        singleton("about"),
        singleton("home"),
    ]
