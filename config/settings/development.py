"""
Development settings for running the monitor locally.
"""
from .base import *  # noqa: F401, F403

DEBUG = True

ALLOWED_HOSTS = ["localhost", "127.0.0.1"]

# Local probe history
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "gracewatch-dev.sqlite3",  # noqa: F405
    }
}

# Plain static storage, no manifest needed for the admin
STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
}

# Show every grace-period transition
LOGGING["loggers"]["uptime"]["level"] = env("UPTIME_LOG_LEVEL", default="DEBUG")  # noqa: F405
