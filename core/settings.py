import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env from the data directory when one is present
DATA_DIR = Path(os.environ.get("DATA_DIR", BASE_DIR / "data"))

env_file = DATA_DIR / ".env"
if env_file.exists():
    load_dotenv(env_file)

SECRET_KEY = os.environ.get(
    "SECRET_KEY",
    "django-insecure-dev-key-change-me-in-production",
)

DEBUG = os.environ.get("DEBUG", "True").lower() in ("true", "1", "yes")

ALLOWED_HOSTS = [
    "localhost",
    "127.0.0.1",
    "0.0.0.0",
    "testserver",
]

INSTALLED_APPS = [
    "trending",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "core.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
            ],
        },
    },
]

WSGI_APPLICATION = "core.wsgi.application"

# Trending data lives only for the lifetime of the process.
DATABASES = {}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "trending-charts",
        "TIMEOUT": int(os.environ.get("TRENDING_CACHE_TTL", "3600")),
        "OPTIONS": {
            # 175 storefronts x 2 charts, with headroom
            "MAX_ENTRIES": 2000,
        },
    }
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ── Trending engine ───────────────────────────────────────────────────────

TRENDING_CACHE_ALIAS = "default"
TRENDING_CACHE_TTL = int(os.environ.get("TRENDING_CACHE_TTL", "3600"))
TRENDING_REQUEST_TIMEOUT = float(os.environ.get("TRENDING_REQUEST_TIMEOUT", "10"))
TRENDING_CHART_LIMIT = int(os.environ.get("TRENDING_CHART_LIMIT", "200"))
TRENDING_MAX_CONCURRENT = int(os.environ.get("TRENDING_MAX_CONCURRENT", "10"))
TRENDING_BATCH_DELAY = float(os.environ.get("TRENDING_BATCH_DELAY", "0.1"))

TRENDING_PREFETCH_ENABLED = os.environ.get(
    "TRENDING_PREFETCH_ENABLED", "False"
).lower() in ("true", "1", "yes")
TRENDING_PREFETCH_BREADTH = os.environ.get("TRENDING_PREFETCH_BREADTH", "quick")
TRENDING_PREFETCH_INTERVAL = int(os.environ.get("TRENDING_PREFETCH_INTERVAL", "3600"))

# ── Logging ───────────────────────────────────────────────────────────────

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "loggers": {
        "trending": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}
