"""Test settings for Lingvo.

Throttling is off so suites that issue many anonymous requests stay
deterministic, and a fast hasher keeps user creation cheap.
"""
from .base import *  # noqa


DEBUG = False
SECRET_KEY = "test-insecure-key"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # noqa: F405
    "DEFAULT_THROTTLE_CLASSES": [],
}

LOGGING["loggers"]["courses"]["level"] = "WARNING"  # noqa: F405
