"""
Django settings for the unit import & query backend.

Values come from environment variables with development defaults.
"""
from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-only-insecure-key")
DEBUG = os.getenv("DJANGO_DEBUG", "true").strip().lower() in {"1", "true", "yes"}
ALLOWED_HOSTS = [host.strip() for host in os.getenv("DJANGO_ALLOWED_HOSTS", "*").split(",") if host.strip()]

INSTALLED_APPS = [
    "api",
]

MIDDLEWARE = [
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "backend.urls"
WSGI_APPLICATION = "backend.wsgi.application"

DATABASES: dict = {}

USE_TZ = True
TIME_ZONE = "UTC"

# Uploads are parsed in memory; keep them small enough to hold at once.
DATA_UPLOAD_MAX_MEMORY_SIZE = int(os.getenv("DATA_UPLOAD_MAX_MEMORY_SIZE", str(25 * 1024 * 1024)))
FILE_UPLOAD_MAX_MEMORY_SIZE = DATA_UPLOAD_MAX_MEMORY_SIZE

# ---------------------------------------------------------------------------
# Unit storage and query columns
# ---------------------------------------------------------------------------

UNITS_DATA_FILE = Path(os.getenv("UNITS_DATA_FILE", str(BASE_DIR / "data" / "properties.json")))

# Record keys used to drop already-imported units, e.g. ("Unit Name",). Empty keeps imports append-only.
UNITS_DEDUP_KEYS = tuple(
    key.strip() for key in os.getenv("UNITS_DEDUP_KEYS", "").split(",") if key.strip()
)

# Overrides for helpers.unit_query.UnitColumns, e.g. {"price": "Price", "area": "Area"}.
UNIT_COLUMNS: dict = {}

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("DJANGO_LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "loggers": {
        "helpers": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "api": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}
