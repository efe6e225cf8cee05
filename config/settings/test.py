"""
Test settings for pytest.
"""
from .base import *  # noqa: F401, F403

DEBUG = False

# Use in-memory SQLite for fast tests
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# Speed up password hashing in tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# Plain static storage, no manifest needed
STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
}

# Disable Slack and email in tests
SLACK_WEBHOOK_URL = ""
NOTIFICATION_EMAIL = ""
EMAIL_HOST = ""
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

# Test monitor (probes are mocked)
MONITOR_SERVICE_NAME = "Test Service"
MONITOR_TARGET_URL = "https://test.example.com/healthz"
MONITOR_HTTP_METHOD = "GET"
MONITOR_HTTP_HEADERS = ""
MONITOR_HTTP_BODY = ""
MONITOR_EXPECTED_CODES = "200-299"
MONITOR_PING_TIMEOUT = 5000
MONITOR_GRACE_PERIOD_FAILURES = 3
MONITOR_CHECK_INTERVAL = 1

API_BEARER_TOKEN = "test-token"
