"""
Script: Strapi origen -> exports/ (JSON).

Variables de entorno requeridas:
  - SOURCE_STRAPI_URL
  - SOURCE_STRAPI_API_TOKEN

Ejecución:
  python scripts/export_data.py
  python scripts/export_data.py --exports-dir backups/2026-10-17
"""

from __future__ import annotations

import sys
from pathlib import Path

from dotenv import load_dotenv

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

load_dotenv(_REPO_ROOT / ".env", override=False)

from cms_sync.cli import main


if __name__ == "__main__":
    raise SystemExit(main(["export", *sys.argv[1:]]))
