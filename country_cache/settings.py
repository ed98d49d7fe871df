"""
Django settings for the country_cache project.

Every deployment-specific value is read from the environment so the same
settings module serves local runs, tests and production.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "dev-insecure-country-cache-key")

DEBUG = env_bool("APP_DEBUG")

ALLOWED_HOSTS = [h.strip() for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "*").split(",") if h.strip()]


INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "rest_framework",
    "countries",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "countries.middleware.CorsMiddleware",
]

ROOT_URLCONF = "country_cache.urls"

WSGI_APPLICATION = "country_cache.wsgi.application"

# Routes are declared without trailing slashes (/countries, /status).
APPEND_SLASH = False


DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("DB_DATABASE", str(BASE_DIR / "db.sqlite3")),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True


REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "UNAUTHENTICATED_USER": None,
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "EXCEPTION_HANDLER": "countries.exceptions.api_exception_handler",
}


# External sources
RESTCOUNTRIES_API = os.environ.get("RESTCOUNTRIES_API", "https://restcountries.com/v2/all")
RESTCOUNTRIES_FIELDS = "name,capital,region,population,flag,currencies"
EXCHANGERATE_API = os.environ.get("EXCHANGERATE_API", "https://open.er-api.com/v6/latest/USD")
EXTERNAL_CONNECT_TIMEOUT = float(os.environ.get("EXTERNAL_CONNECT_TIMEOUT", 10))
EXTERNAL_READ_TIMEOUT = float(os.environ.get("EXTERNAL_READ_TIMEOUT", 30))

# Single-slot directory for the generated summary image.
CACHE_DIR = os.environ.get("CACHE_DIR", str(BASE_DIR / "cache"))

# Pin the GDP multiplier sequence; unset means system randomness.
GDP_MULTIPLIER_SEED = os.environ.get("GDP_MULTIPLIER_SEED") or None


LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
    },
}
