"""Parametros globales del proyecto."""

from __future__ import annotations

import logging
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent
DATA_DIR = Path(os.environ.get("AMADAMIA_DATA_DIR", BASE_DIR / "data"))

API_URL = os.environ.get("AMADAMIA_API_URL", "http://localhost:8000/api").rstrip("/")
SERVER_URL = os.environ.get("AMADAMIA_SERVER_URL", "http://localhost:8000").rstrip("/")
PUBLIC_MEDIA_PREFIX = "/api/public"

AUTH_STORAGE_KEY = "auth-storage"
AUTH_STORAGE_FILE = DATA_DIR / f"{AUTH_STORAGE_KEY}.json"

# Tiempos de cache en segundos.
DEFAULT_STALE_TIME = 60.0
PRODUCTS_STALE_TIME = 5 * 60.0
CACHE_GC_TIME = 5 * 60.0

PRODUCTS_PAGE_LIMIT = 50
MAX_PRODUCT_IMAGES = 4
LOW_STOCK_THRESHOLD = 5
API_WORKERS = 4

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
