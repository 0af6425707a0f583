"""
CSVPages - Centralised configuration.

All tunables live here.  Every other module imports from config
instead of reading os.environ directly.
"""

from __future__ import annotations
import os
from pathlib import Path


# ── Paths ──────────────────────────────────────────────────────────────
BASE_DIR         = Path(__file__).resolve().parent
SCHEMA_PATH      = Path(os.environ.get("CSVPAGES_SCHEMA", BASE_DIR / "page_schema.json"))
FILES_DIR        = Path(os.environ.get("CSVPAGES_FILES_DIR", BASE_DIR / "files")).resolve()

# Relative file tokens in a CSV are resolved against this directory
FILES_SOURCE_DIR = Path(os.environ.get("CSVPAGES_FILES_SOURCE_DIR", BASE_DIR / "import_files")).resolve()

# ── Database ───────────────────────────────────────────────────────────
DB_URL = os.environ.get("CSVPAGES_DB", f"sqlite:///{BASE_DIR / 'csvpages.sqlite'}")

# ── Server ─────────────────────────────────────────────────────────────
HOST   = os.environ.get("CSVPAGES_HOST", "0.0.0.0")
PORT   = int(os.environ.get("CSVPAGES_PORT", "5000"))
DEBUG  = os.environ.get("CSVPAGES_DEBUG", "0") == "1"
SECRET = os.environ.get("CSVPAGES_SECRET", "csvpages-dev-key-change-in-prod")
MAX_UPLOAD_BYTES = int(os.environ.get("CSVPAGES_MAX_UPLOAD_BYTES", str(32 * 1024 * 1024)))

# ── Logging ────────────────────────────────────────────────────────────
LOG_LEVEL = os.environ.get("CSVPAGES_LOG_LEVEL", "INFO").upper()

# ── Remote file fetch ──────────────────────────────────────────────────
FETCH_TIMEOUT = float(os.environ.get("CSVPAGES_FETCH_TIMEOUT", "15"))
USER_AGENT    = os.environ.get("CSVPAGES_USER_AGENT", "CSVPages/1.0 (page importer)")

# ── Import defaults ────────────────────────────────────────────────────
DEFAULT_DELIMITER = ","
DEFAULT_QUOTECHAR = '"'

# ── Startup seed (imported once, while the parent has no children) ─────
SEED_CSV_PATH = Path(os.environ.get("CSVPAGES_SEED_CSV", BASE_DIR / "seed.csv"))
SEED_TEMPLATE = os.environ.get("CSVPAGES_SEED_TEMPLATE", "article")
SEED_PARENT   = os.environ.get("CSVPAGES_SEED_PARENT", "/")
