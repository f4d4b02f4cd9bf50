"""
Django settings for backend project.

Store wiring is driven by the environment: an adapter is only active when
its connection configuration is present.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name, default=False):
    val = os.environ.get(name)
    if val is None or val == "":
        return default
    return val.strip().lower() in ("true", "1", "yes", "on")


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "dev-only-secret-key-change-me")
DEBUG = _env_bool("DJANGO_DEBUG", False)
ALLOWED_HOSTS = [h.strip() for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "*").split(",") if h.strip()]

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "rest_framework",
    "site_content",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "backend.urls"
WSGI_APPLICATION = "backend.wsgi.application"
ASGI_APPLICATION = "backend.asgi.application"

# ---- Database ----
# DB_NAME switches on the row-store adapter. Without it Django still gets a
# local SQLite file for its own bookkeeping, but no content is stored there.
DB_TIMEOUT = int(os.environ.get("DB_TIMEOUT", "5"))
DB_ENGINE = os.environ.get("DB_ENGINE", "django.db.backends.sqlite3")
DB_NAME = os.environ.get("DB_NAME", "")


def _db_options(engine, timeout):
    """Connect and per-statement limits in each driver's own option names."""
    if engine.endswith("sqlite3"):
        return {"timeout": timeout}
    if "postgresql" in engine:
        return {"connect_timeout": timeout, "options": f"-c statement_timeout={timeout * 1000}"}
    if "mysql" in engine:
        return {"connect_timeout": timeout, "read_timeout": timeout, "write_timeout": timeout}
    return {"connect_timeout": timeout}


if DB_NAME:
    DATABASES = {
        "default": {
            "ENGINE": DB_ENGINE,
            "NAME": DB_NAME,
            "USER": os.environ.get("DB_USER", ""),
            "PASSWORD": os.environ.get("DB_PASSWORD", ""),
            "HOST": os.environ.get("DB_HOST", ""),
            "PORT": os.environ.get("DB_PORT", ""),
            "OPTIONS": _db_options(DB_ENGINE, DB_TIMEOUT),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
            "OPTIONS": _db_options("django.db.backends.sqlite3", DB_TIMEOUT),
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ---- Caches ----
# "content_local" is the in-process last-resort tier and always exists.
# "content_kv" is only defined when a Redis connection is configured.
REDIS_URL = os.environ.get("REDIS_URL", "")
REDIS_TIMEOUT = float(os.environ.get("REDIS_TIMEOUT", "2"))

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "default",
    },
    "content_local": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "site-content-local",
        "TIMEOUT": None,
    },
}
if REDIS_URL:
    CACHES["content_kv"] = {
        "BACKEND": "django.core.cache.backends.redis.RedisCache",
        "LOCATION": REDIS_URL,
        "TIMEOUT": None,
        "OPTIONS": {
            "socket_connect_timeout": REDIS_TIMEOUT,
            "socket_timeout": REDIS_TIMEOUT,
        },
    }

# ---- Content store ----
CONTENT_STORE = {
    "FILE_PATH": os.environ.get("CONTENT_FILE_PATH", ""),
    "ROW_STORE_ALIAS": "default" if DB_NAME else None,
    "KV_CACHE_ALIAS": "content_kv" if REDIS_URL else None,
    "LOCAL_CACHE_ALIAS": "content_local",
    "KEY_PREFIX": os.environ.get("CONTENT_KEY_PREFIX", "aulait"),
}

ADMIN_PASSCODE = os.environ.get("ADMIN_PASSCODE", "")

# ---- REST framework ----
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
        "rest_framework.parsers.FormParser",
    ],
    "UNAUTHENTICATED_USER": None,
    "EXCEPTION_HANDLER": "site_content.utilities.envelope_exception_handler",
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

# ---- Logging ----
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "loggers": {
        "site_content": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "django": {
            "handlers": ["console"],
            "level": "WARNING",
        },
    },
}
