"""
Pipeline de sincronización one-way: exports locales -> Strapi (content API).

Este paquete está diseñado para ejecutarse como job/CLI,
no como parte del request/response de ningún API.

Objetivos de diseño:
- Idempotencia: se puede ejecutar N veces sin duplicar entradas en Strapi.
- Create-or-update por "matching key" (slug/name/title) configurable por colección.
- Fallos parciales esperables: un registro fallido no aborta el batch.
- Dry run: calcula el resultado sin ninguna llamada mutante.
"""
