"""
Script: exports locales -> Strapi destino (create-or-update).

Variables de entorno requeridas:
  - STRAPI_URL
  - STRAPI_API_TOKEN

Ejecución:
  python scripts/sync_to_cloud.py
  python scripts/sync_to_cloud.py --dry-run
  python scripts/sync_to_cloud.py --no-update-existing
"""

from __future__ import annotations

import sys
from pathlib import Path

from dotenv import load_dotenv

# Permite ejecutar este script desde cualquier cwd sin instalar el paquete.
_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

load_dotenv(_REPO_ROOT / ".env", override=False)

from cms_sync.cli import main


if __name__ == "__main__":
    raise SystemExit(main(["sync", *sys.argv[1:]]))
