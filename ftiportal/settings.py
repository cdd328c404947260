"""
Django settings for the FTI member portal.

Every deployment-specific value is read from the environment. The application
database is MySQL in production; the legacy member registry lives in SQL
Server and is reached through the "legacy" database alias.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def env_list(name, default=""):
    return [item.strip() for item in os.environ.get(name, default).split(",") if item.strip()]


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "insecure-dev-key-change-me")
DEBUG = env_bool("DJANGO_DEBUG", False)
ALLOWED_HOSTS = env_list("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1")
CSRF_TRUSTED_ORIGINS = env_list("DJANGO_CSRF_TRUSTED_ORIGINS")

SITE_URL = os.environ.get("SITE_URL", "http://localhost:3000")

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "tinymce",
    "reversion",
    "import_export",
    "utils",
    "members",
    "legacy",
    "activity",
    "notifications",
    "membership",
    "companies",
    "address_updates",
    "contact",
]

MIDDLEWARE = [
    "utils.middleware.HealthCheckMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "ftiportal.urls"
WSGI_APPLICATION = "ftiportal.wsgi.application"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

#########################
# Databases
#
# "default" holds portal data (applications, notifications, logs).
# "legacy" is the SQL Server registry of existing members. Tables there are
# owned by the registry, so Django only creates them when
# LEGACY_DB_MANAGED is set (local development and tests).

DATABASES = {
    "default": {
        "ENGINE": os.environ.get("DB_ENGINE", "django.db.backends.mysql"),
        "NAME": os.environ.get("DB_NAME", "fti_portal"),
        "USER": os.environ.get("DB_USER", ""),
        "PASSWORD": os.environ.get("DB_PASSWORD", ""),
        "HOST": os.environ.get("DB_HOST", "localhost"),
        "PORT": os.environ.get("DB_PORT", "3306"),
        "OPTIONS": {"charset": "utf8mb4"},
    },
    "legacy": {
        "ENGINE": os.environ.get("LEGACY_DB_ENGINE", "mssql"),
        "NAME": os.environ.get("LEGACY_DB_NAME", "FTI"),
        "USER": os.environ.get("LEGACY_DB_USER", ""),
        "PASSWORD": os.environ.get("LEGACY_DB_PASSWORD", ""),
        "HOST": os.environ.get("LEGACY_DB_HOST", "localhost"),
        "PORT": os.environ.get("LEGACY_DB_PORT", "1433"),
        "OPTIONS": {
            "driver": os.environ.get("LEGACY_DB_DRIVER", "ODBC Driver 18 for SQL Server"),
            "extra_params": "TrustServerCertificate=yes",
        },
    },
}
DATABASE_ROUTERS = ["ftiportal.db_routers.LegacyRouter"]
LEGACY_DB_MANAGED = env_bool("LEGACY_DB_MANAGED", False)

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
AUTH_USER_MODEL = "members.Member"

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LANGUAGE_CODE = "th"
TIME_ZONE = "Asia/Bangkok"
USE_I18N = True
USE_TZ = True

#########################
# Static and media storage

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
MEDIA_URL = "/media/"
MEDIA_ROOT = BASE_DIR / "media"

GS_BUCKET_NAME = os.environ.get("GS_BUCKET_NAME", "")
GS_MEDIA_LOCATION = os.environ.get("GS_MEDIA_LOCATION", "media")
GS_STATIC_LOCATION = os.environ.get("GS_STATIC_LOCATION", "static")

if GS_BUCKET_NAME:
    STORAGES = {
        "default": {"BACKEND": "ftiportal.storage_backends.MediaRootGCS"},
        "staticfiles": {"BACKEND": "ftiportal.storage_backends.StaticRootGCS"},
    }

#########################
# Uploads

CLOUDINARY_CLOUD_NAME = os.environ.get("CLOUDINARY_CLOUD_NAME", "")
CLOUDINARY_UPLOAD_PRESET = os.environ.get("CLOUDINARY_UPLOAD_PRESET", "")
UPLOAD_MAX_CONCURRENT = int(os.environ.get("UPLOAD_MAX_CONCURRENT", "2"))
UPLOAD_TIMEOUT_SECONDS = int(os.environ.get("UPLOAD_TIMEOUT_SECONDS", "60"))
DATA_UPLOAD_MAX_MEMORY_SIZE = 20 * 1024 * 1024
FILE_UPLOAD_MAX_MEMORY_SIZE = 10 * 1024 * 1024

#########################
# Email

EMAIL_BACKEND = os.environ.get(
    "EMAIL_BACKEND", "django.core.mail.backends.smtp.EmailBackend"
)
EMAIL_HOST = os.environ.get("EMAIL_HOST", "localhost")
EMAIL_PORT = int(os.environ.get("EMAIL_PORT", "587"))
EMAIL_HOST_USER = os.environ.get("EMAIL_HOST_USER", "")
EMAIL_HOST_PASSWORD = os.environ.get("EMAIL_HOST_PASSWORD", "")
EMAIL_USE_TLS = env_bool("EMAIL_USE_TLS", True)
DEFAULT_FROM_EMAIL = os.environ.get("DEFAULT_FROM_EMAIL", "noreply@fti.or.th")
EMAIL_DEV_MODE = env_bool("EMAIL_DEV_MODE", False)
EMAIL_DEV_MODE_REDIRECT_TO = os.environ.get("EMAIL_DEV_MODE_REDIRECT_TO", "")

#########################
# Sessions

SESSION_COOKIE_AGE = 60 * 60 * 8
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SECURE = not DEBUG
CSRF_COOKIE_SECURE = not DEBUG

TINYMCE_DEFAULT_CONFIG = {
    "height": 300,
    "menubar": False,
    "plugins": "link lists",
    "toolbar": "undo redo | bold italic | bullist numlist | link",
}

#########################
# Logging

LOG_LEVEL = os.environ.get("DJANGO_LOG_LEVEL", "INFO")

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
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "django": {"handlers": ["console"], "level": "INFO", "propagate": False},
        **{
            app: {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False}
            for app in (
                "members",
                "membership",
                "companies",
                "address_updates",
                "contact",
                "notifications",
                "activity",
                "legacy",
                "utils",
            )
        },
    },
}
