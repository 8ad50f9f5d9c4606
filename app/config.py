# config.py
# Environment-driven settings shared by the index and the HTTP service.

import os
from pathlib import Path

# Used for both load-time encoding and query-time corner encoding.
# Changing it requires a reload; mixed precisions silently lose recall.
PRECISION = int(os.getenv("GEO_PRECISION", "15"))

DATA_DIR = Path(os.getenv("GEO_DATA_DIR", str(Path(__file__).resolve().parents[1] / "data")))

CITY_FILES = {
    "1": "mumbai.json",
    "2": "ny.json",
}

CORS_ORIGINS = [o.strip() for o in os.getenv("GEO_CORS_ORIGINS", "*").split(",") if o.strip()]

LOG_LEVEL = os.getenv("GEO_LOG_LEVEL", "INFO").upper()

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
