"""Django settings for the WordPress post-update compatibility API.

Environment-driven configuration for the WordPress MySQL database, table
prefix, logging, and security defaults.
"""
import os
from pathlib import Path
from urllib.parse import urlparse

from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent


def _get_env(name: str, default: str | None = None) -> str | None:
    """Read an environment variable with an optional fallback."""
    return os.environ.get(name, default)


def _parse_database_url(url: str) -> dict:
    """Parse a MySQL-style DATABASE_URL into a Django DATABASES entry."""
    parsed = urlparse(url)
    return {
        "ENGINE": "django.db.backends.mysql",
        "NAME": parsed.path.lstrip("/"),
        "USER": parsed.username,
        "PASSWORD": parsed.password,
        "HOST": parsed.hostname,
        "PORT": parsed.port or "3306",
        "OPTIONS": {"charset": "utf8mb4"},
    }


SECRET_KEY = _get_env("SECRET_KEY", "dev-secret-key-change-me")
DEBUG = _get_env("DEBUG", "True") == "True"
if not DEBUG and SECRET_KEY in ("change-me", "dev-secret-key-change-me"):
    raise ImproperlyConfigured("SECRET_KEY must be set in production")
ALLOWED_HOSTS = [
    h.strip()
    for h in _get_env("ALLOWED_HOSTS", "localhost,127.0.0.1,0.0.0.0").split(",")
    if h.strip()
]

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "rest_framework",
    "drf_spectacular",
    "core",
    "authentication",
    "access_control",
    "options",
    "posts",
    "scripts",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "core.urls"

WSGI_APPLICATION = "core.wsgi.application"

DATABASE_URL = _get_env("DATABASE_URL")
if DATABASE_URL:
    DATABASES = {"default": _parse_database_url(DATABASE_URL)}
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.mysql",
            "NAME": _get_env("WP_DB_NAME", "wordpress"),
            "USER": _get_env("WP_DB_USER", "root"),
            "PASSWORD": _get_env("WP_DB_PASSWORD", ""),
            "HOST": _get_env("WP_DB_HOST", "localhost"),
            "PORT": _get_env("WP_DB_PORT", "3306"),
            "OPTIONS": {"charset": "utf8mb4"},
        }
    }
# Persistent connections stand in for the pool; Django still closes them at
# request end once they exceed this age or become unusable.
DATABASES["default"]["CONN_MAX_AGE"] = int(_get_env("WP_DB_CONN_MAX_AGE", "60"))

# Alias of the WordPress database handed to the update service.
WP_DATABASE_ALIAS = _get_env("WP_DATABASE_ALIAS", "default")
WP_TABLE_PREFIX = _get_env("WP_TABLE_PREFIX", "wp_")
# The WordPress schema is provisioned externally; only test databases let
# Django create the tables.
WP_MANAGE_TABLES = _get_env("WP_MANAGE_TABLES", "False") == "True"
WP_DEFAULT_SITE_URL = _get_env("WP_DEFAULT_SITE_URL", "http://localhost")
# bcrypt cost used when the seed command hashes application passwords.
WP_APP_PASSWORD_ROUNDS = int(_get_env("WP_APP_PASSWORD_ROUNDS", "12"))

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

DEBUG_ERRORS = _get_env("DEBUG_ERRORS", "False") == "True"

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": ["core.authentication.ApplicationPasswordAuthentication"],
    "DEFAULT_PERMISSION_CLASSES": [],
    "DEFAULT_PARSER_CLASSES": ["rest_framework.parsers.JSONParser"],
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "EXCEPTION_HANDLER": "core.exceptions.custom_exception_handler",
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}

SPECTACULAR_SETTINGS = {
    "TITLE": "WordPress Post Update API",
    "DESCRIPTION": (
        "WordPress-compatible REST endpoint for updating posts, authenticated "
        "with application passwords over HTTP Basic auth."
    ),
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
    "SERVE_PUBLIC": True,
    "APPEND_COMPONENTS": {
        "securitySchemes": {
            "basicAuth": {
                "type": "http",
                "scheme": "basic",
            }
        }
    },
    "SECURITY": [{"basicAuth": []}],
}

LOG_LEVEL = _get_env("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django.db.backends": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
    },
}
