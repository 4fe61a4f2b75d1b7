"""
Base Django settings for the miles_backend project.

Every deploy-specific value is read from the environment (and an optional
.env file); prod.py layers CORS restrictions and the Redis channel layer on top.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Values already in the process environment win over the .env file
load_dotenv(os.path.join(BASE_DIR, "..", ".env"))


def env_bool(name, default=False):
    return os.getenv(name, str(default)).strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "django-insecure-miles-dev-key-change-me")
DEBUG = env_bool("DJANGO_DEBUG", True)
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "*").split(',')


# Application definition

INSTALLED_APPS = [
    # ASGI runserver (HTTP + WebSocket)
    'daphne',

    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Third party
    'corsheaders',
    'rest_framework',
    'channels',

    # Local apps
    'realtime',
    'professionals',
    'service_requests',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'miles_backend.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'miles_backend.wsgi.application'
ASGI_APPLICATION = 'miles_backend.asgi.application'


# Database
# SQLite for local development; set POSTGRES_DB to use PostgreSQL (partial
# unique indexes and row locks behave as in production there).

if os.getenv("POSTGRES_DB"):
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': os.getenv("POSTGRES_DB"),
            'USER': os.getenv("POSTGRES_USER", "postgres"),
            'PASSWORD': os.getenv("POSTGRES_PASSWORD", ""),
            'HOST': os.getenv("POSTGRES_HOST", "localhost"),
            'PORT': os.getenv("POSTGRES_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }


AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]

LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.getenv("TIME_ZONE", "Asia/Tokyo")
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# Django REST Framework
# Customer and link endpoints are open; staff endpoints use the admin session.

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework.authentication.SessionAuthentication',
        'rest_framework.authentication.BasicAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.AllowAny',
    ],
    'DEFAULT_PAGINATION_CLASS': 'rest_framework.pagination.LimitOffsetPagination',
    'PAGE_SIZE': 50,
}


# CORS (restricted in prod.py)
CORS_ALLOW_ALL_ORIGINS = True


# Channels
CHANNEL_LAYERS = {
    "default": {
        "BACKEND": "channels.layers.InMemoryChannelLayer",
    }
}

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")


# Celery
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", REDIS_URL)
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", REDIS_URL)
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = TIME_ZONE


# Matching
MATCH_DEFAULT_RADIUS_KM = float(os.getenv("MATCH_DEFAULT_RADIUS_KM", "50"))
MATCH_OFFER_WAIT_MINUTES = int(os.getenv("MATCH_OFFER_WAIT_MINUTES", "7"))
MATCH_SWEEP_INTERVAL_SECONDS = int(os.getenv("MATCH_SWEEP_INTERVAL_SECONDS", "60"))

CELERY_BEAT_SCHEDULE = {
    "sweep-expired-matches": {
        "task": "service_requests.tasks.sweep_expired_matches_task",
        "schedule": MATCH_SWEEP_INTERVAL_SECONDS,
    },
}

# Shared secret for scheduler / internal calls (X-Internal-Token header)
INTERNAL_API_TOKEN = os.getenv("INTERNAL_API_TOKEN", "")

# Base URL embedded in accept/reject links
APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:8000")


# External providers (empty key = feature disabled / dry run)
GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY", "")
GEOCODING_LANGUAGE = os.getenv("GEOCODING_LANGUAGE", "ja")
GEOCODING_HTTP_TIMEOUT = float(os.getenv("GEOCODING_HTTP_TIMEOUT", "10"))

RESEND_API_KEY = os.getenv("RESEND_API_KEY", "")
MAIL_FROM = os.getenv("MAIL_FROM", "Miles <onboarding@resend.dev>")

LINE_CHANNEL_ACCESS_TOKEN = os.getenv("LINE_CHANNEL_ACCESS_TOKEN", "")

NOTIFICATION_HTTP_TIMEOUT = float(os.getenv("NOTIFICATION_HTTP_TIMEOUT", "10"))


# Logging

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
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
        "level": "WARNING",
    },
    "loggers": {
        "services": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "service_requests": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "professionals": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "realtime": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}
