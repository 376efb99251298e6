"""Django settings for the salesdesk project.

Most values come from environment variables so the same settings module works
locally (SQLite, no Supabase) and in deployment.
"""

import os
from pathlib import Path

from django.core.management.utils import get_random_secret_key

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


DEBUG = _env_bool("DJANGO_DEBUG", False)

# Without DJANGO_SECRET_KEY a production process gets a random key, so
# sessions do not survive a restart until one is configured.
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY") or (
    "django-insecure-salesdesk-dev-key" if DEBUG else get_random_secret_key()
)
ALLOWED_HOSTS = [
    h.strip()
    for h in os.getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")
    if h.strip()
]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "core",
    "crm",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "core.middleware.LoginRequiredMiddleware",
]

ROOT_URLCONF = "salesdesk.urls"

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

WSGI_APPLICATION = "salesdesk.wsgi.application"

# Mapping of Django database keys to their environment variables
_DB_ENV_VARS = {
    "ENGINE": "DB_ENGINE",
    "NAME": "DB_NAME",
    "USER": "DB_USER",
    "PASSWORD": "DB_PASSWORD",
    "HOST": "DB_HOST",
    "PORT": "DB_PORT",
}


def _load_db_config() -> dict:
    """Return the default database from the environment, or local SQLite."""
    env_config = {k: os.getenv(env) for k, env in _DB_ENV_VARS.items()}
    if env_config["ENGINE"] and env_config["NAME"]:
        return {k: v or "" for k, v in env_config.items()}
    return {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }


DATABASES = {"default": _load_db_config()}

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("TIME_ZONE", "Asia/Bangkok")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LOGIN_URL = "/admin/login/"
LOGIN_EXEMPT_URLS = [
    r"^healthz$",
    r"^admin/",
    r"^accounts/",
    r"^api/",
]

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
        "rest_framework.authentication.BasicAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "EXCEPTION_HANDLER": "crm.exceptions.custom_exception_handler",
}

SALESDESK_BATCH_CHUNK_SIZE = int(os.getenv("SALESDESK_BATCH_CHUNK_SIZE", "50"))
SALESDESK_LOOKUP_CACHE_TTL = int(os.getenv("SALESDESK_LOOKUP_CACHE_TTL", "300"))
SALESDESK_ADMIN_PASSWORD = os.getenv("SALESDESK_ADMIN_PASSWORD", "")
SALESDESK_DOCUMENTS_BUCKET = os.getenv("SALESDESK_DOCUMENTS_BUCKET", "documents")
SALESDESK_COMPANY_NAME = os.getenv("SALESDESK_COMPANY_NAME", "RCL (Thailand) Co., Ltd.")
SALESDESK_COMPANY_ADDRESS = os.getenv(
    "SALESDESK_COMPANY_ADDRESS", "123 Business Street, Bangkok 10100"
)
SALESDESK_COMPANY_CONTACT = os.getenv(
    "SALESDESK_COMPANY_CONTACT", "Tel: +66 2 123 4567 | Email: claims@rcl-thailand.com"
)
SALESDESK_REQUEST_APPROVERS = os.getenv("SALESDESK_REQUEST_APPROVERS", "Fabien or Umberto")

LOGGING_CONFIG = None
