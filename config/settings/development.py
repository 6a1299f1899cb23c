"""
Django Settings - Development Configuration
"""

from .base import *  # noqa: F401,F403

DEBUG = True

# Simulation endpoints are opt-in even locally
BILLING_DEV_MODE = config("BILLING_DEV_MODE", default=True, cast=bool)

LOGGING["loggers"]["django.db.backends"] = {
    "handlers": ["console"],
    "level": config("SQL_LOG_LEVEL", default="INFO"),
    "propagate": False,
}

DEV_DISABLE_THROTTLING = config("DEV_DISABLE_THROTTLING", default=False, cast=bool)

if DEV_DISABLE_THROTTLING:
    REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {
        scope: "100000/minute" for scope in REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"]
    }

EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'
