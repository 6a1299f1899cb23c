"""
Django Settings - Testing Configuration
"""

from .base import *  # noqa: F401,F403

DEBUG = False
TESTING = True

SECRET_KEY = "test-secret-key-not-for-production"

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

# High limits so functional suites are never throttled
REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {
    "login": "10000/minute",
    "invitation_accept": "10000/minute",
    "attendance_clock": "10000/minute",
    "payment_initiate": "10000/minute",
}

# Use sync Celery
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "hure-tests-cache",
    }
}

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

# Deterministic billing configuration
BILLING_TRIAL_DAYS = 10
BILLING_CYCLE_DAYS = 31
BILLING_GRACE_PERIOD_DAYS = 0
BILLING_DEV_MODE = False
MPESA_ENVIRONMENT = "sandbox"
MPESA_CONSUMER_KEY = "test-consumer-key"
MPESA_CONSUMER_SECRET = "test-consumer-secret"
MPESA_PASSKEY = "test-passkey"
MPESA_SHORTCODE = "174379"
MPESA_CALLBACK_URL = "https://api.example.test/api/v1/billing/webhooks/mpesa"
MPESA_CALLBACK_TOKEN = "test-callback-token"
FLUTTERWAVE_SECRET_KEY = "FLWSECK_TEST-secret"
FLUTTERWAVE_SECRET_HASH = "test-secret-hash"

# Disable logging during tests
LOGGING = {}

# Email - In-memory backend
EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
