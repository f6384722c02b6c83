"""Django settings for the SPL label importer."""
import os
import sys
from os.path import abspath
from os.path import dirname

import dj_database_url

from common.util import is_truthy

# Name of the deployment environment (dev/prod)
ENV = os.environ.get("ENV", "dev")

# -- Paths

# Name of the project
PROJECT_NAME = "spl_labels"

# Absolute path of project Django directory
BASE_DIR = dirname(dirname(abspath(__file__)))

# -- Application

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "labels.apps.LabelsConfig",
    "importer.apps.ImporterConfig",
]

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# -- Security
SECRET_KEY = os.environ.get("SECRET_KEY", "r5l#x0p!q7s9mz(d%4u2k+h8^v1c&b6e")

# -- Debug

# Activates debugging
DEBUG = is_truthy(os.environ.get("DEBUG", False))

# -- Database

DB_URL = os.environ.get("DATABASE_URL", f"sqlite:///{BASE_DIR}/spl_labels.sqlite3")

DATABASES = {
    "default": dj_database_url.parse(DB_URL),
}

SQLITE = DB_URL.startswith("sqlite")

# -- Internationalisation

USE_I18N = False

# Make Django use timezone-aware datetimes internally
USE_TZ = True

# Time zone
TIME_ZONE = "UTC"

# -- Importer

# Link section hierarchies and save characteristics with bulk lookups and
# inserts instead of one child at a time.
SPL_USE_BULK_OPERATIONS = is_truthy(os.environ.get("SPL_USE_BULK_OPERATIONS", False))

# -- Logging
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {"format": "%(asctime)s %(name)s %(levelname)s %(message)s"},
    },
    "handlers": {
        "console": {
            "level": "DEBUG",
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
    },
    "loggers": {
        "root": {
            "handlers": ["console"],
            "level": "WARNING",
        },
        "importer": {
            "handlers": ["console"],
            "level": os.environ.get("LOG_LEVEL", "DEBUG"),
            "propagate": False,
        },
        "labels": {
            "handlers": ["console"],
            "level": os.environ.get("LOG_LEVEL", "DEBUG"),
            "propagate": False,
        },
        "common": {
            "handlers": ["console"],
            "level": os.environ.get("LOG_LEVEL", "DEBUG"),
            "propagate": False,
        },
    },
}

# -- Sentry error tracking

SENTRY_ENABLED = is_truthy(os.environ.get("SENTRY_DSN", "False"))

if SENTRY_ENABLED:
    import sentry_sdk
    from sentry_sdk.integrations.django import DjangoIntegration

    sentry_kwargs = {
        "dsn": os.environ["SENTRY_DSN"],
        "environment": ENV,
        "integrations": [DjangoIntegration()],
    }
    if "shell" in sys.argv:
        sentry_kwargs["before_send"] = lambda event, hint: None

    if os.getenv("GIT_COMMIT"):
        sentry_kwargs["release"] = os.getenv("GIT_COMMIT")

    sentry_sdk.init(**sentry_kwargs)
