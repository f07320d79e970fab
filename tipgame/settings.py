"""
Django settings for the tipgame project.

Values come from the environment; a .env file at the project root is loaded
first so local development needs no exported variables.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env")


def env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.getenv("TIPGAME_SECRET_KEY", "tipgame-insecure-development-key")
DEBUG = env_bool("TIPGAME_DEBUG", True)
ALLOWED_HOSTS = [h for h in os.getenv("TIPGAME_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h]

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "reversion",
    "tipgame.settlement_core",
    "tipgame.predictions",
]

MIDDLEWARE = []

# ==================================================
# DATABASE
# ==================================================
# PostgreSQL when DB_NAME is set, a local SQLite file otherwise

if os.getenv("DB_NAME"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("DB_NAME"),
            "USER": os.getenv("DB_USER", ""),
            "PASSWORD": os.getenv("DB_PASSWORD", ""),
            "HOST": os.getenv("DB_HOST", "localhost"),
            "PORT": os.getenv("DB_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": str(BASE_DIR / "tipgame.sqlite3"),
            "USER": "",
            "PASSWORD": "",
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

USE_TZ = True
TIME_ZONE = "UTC"

# ==================================================
# SETTLEMENT
# ==================================================

# Points a bundle shares between its main question and its bonus questions
TIPGAME_BUNDLE_CEILING = float(os.getenv("TIPGAME_BUNDLE_CEILING", "20"))

# Squad totals are rounded to this many decimals before seeding
TIPGAME_SCORE_DECIMALS = int(os.getenv("TIPGAME_SCORE_DECIMALS", "2"))

# ==================================================
# LOGGING
# ==================================================

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "[{levelname}] {asctime} {name}: {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": os.getenv("TIPGAME_LOG_LEVEL", "INFO"),
    },
}
