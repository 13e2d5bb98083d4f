# topupbd/settings.py
from pathlib import Path
from decouple import config, Csv

BASE_DIR = Path(__file__).resolve().parent.parent

# -------------------------------------------------------------------
# Core / Environment
# -------------------------------------------------------------------
ENV = config("ENV", default="development")  # "development" | "production" | "staging"
DEBUG = config("DEBUG", default=(ENV != "production"), cast=bool)
SECRET_KEY = config("SECRET_KEY", default="django-insecure-topupbd-dev-only")

ALLOWED_HOSTS = config("ALLOWED_HOSTS", cast=Csv(), default="localhost,127.0.0.1")
CSRF_TRUSTED_ORIGINS = config(
    "CSRF_TRUSTED_ORIGINS",
    cast=Csv(),
    default="http://localhost:3000,http://127.0.0.1:3000",
)

# -------------------------------------------------------------------
# Installed Apps
# -------------------------------------------------------------------
INSTALLED_APPS = [
    # Django core
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.staticfiles",

    # Third-party
    "rest_framework",
    "drf_spectacular",
    "corsheaders",

    # Project apps
    "core.apps.CoreConfig",
    "services.apps.ServicesConfig",
    "orders.apps.OrdersConfig",
    "payments.apps.PaymentsConfig",
    "users.apps.UsersConfig",
    "backoffice.apps.BackofficeConfig",
]

# -------------------------------------------------------------------
# Middleware
# -------------------------------------------------------------------
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",

    "corsheaders.middleware.CorsMiddleware",

    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

# -------------------------------------------------------------------
# URLs / Templates / WSGI
# -------------------------------------------------------------------
ROOT_URLCONF = "topupbd.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
            ],
        },
    },
]

WSGI_APPLICATION = "topupbd.wsgi.application"

# -------------------------------------------------------------------
# Storage: no local database. Visitor state lives in the session,
# accounts and profiles live on the hosted backend.
# -------------------------------------------------------------------
DATABASES = {}

CACHES = {
    "default": {
        "BACKEND": config("CACHE_BACKEND", default="django.core.cache.backends.locmem.LocMemCache"),
        "LOCATION": config("CACHE_LOCATION", default="topupbd"),
    }
}

SESSION_ENGINE = "django.contrib.sessions.backends.cache"
SESSION_COOKIE_AGE = config("SESSION_COOKIE_AGE", default=60 * 60 * 24 * 14, cast=int)
SESSION_SAVE_EVERY_REQUEST = True

# -------------------------------------------------------------------
# I18N / TZ
# -------------------------------------------------------------------
LANGUAGE_CODE = "en-us"
TIME_ZONE = "Asia/Dhaka"
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# -------------------------------------------------------------------
# DRF / Schema
# -------------------------------------------------------------------
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": (
        "rest_framework.permissions.AllowAny",
    ),
    "UNAUTHENTICATED_USER": None,
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Top Up BD API",
    "DESCRIPTION": "Social-media engagement storefront: catalogue, orders, manual top-ups",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
}

# -------------------------------------------------------------------
# CORS
# -------------------------------------------------------------------
CORS_ALLOWED_ORIGINS = config(
    "CORS_ALLOWED_ORIGINS",
    cast=Csv(),
    default="http://localhost:3000,http://127.0.0.1:3000",
)
CORS_ALLOW_CREDENTIALS = True
CORS_ALLOW_ALL_ORIGINS = config("CORS_ALLOW_ALL_ORIGINS", default=DEBUG, cast=bool)
CORS_URLS_REGEX = r"^/api/(?!proxy).*$"  # the proxy sets its own headers

# -------------------------------------------------------------------
# Security
# -------------------------------------------------------------------
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_SSL_REDIRECT = config("SECURE_SSL_REDIRECT", default=(ENV == "production"), cast=bool)

SESSION_COOKIE_SECURE = (ENV == "production")

SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = "DENY"
REFERRER_POLICY = "same-origin"

# -------------------------------------------------------------------
# Provider panel (read from .env)
# -------------------------------------------------------------------
PANEL_API_URL = config("PANEL_API_URL", default="https://motherpanel.com/api/v2")
PANEL_API_KEY = config("PANEL_API_KEY", default="change-me")
PANEL_TIMEOUT_CONNECT = config("PANEL_TIMEOUT_CONNECT", default=5, cast=float)
PANEL_TIMEOUT_READ = config("PANEL_TIMEOUT_READ", default=25, cast=float)

# -------------------------------------------------------------------
# Pricing / fees (BDT)
# -------------------------------------------------------------------
USD_TO_BDT = config("USD_TO_BDT", default="120")
CATALOGUE_RATE_SURCHARGE = config("CATALOGUE_RATE_SURCHARGE", default="0")
# shared by every visitor; POST /api/services/catalogue/ refreshes it
CATALOGUE_CACHE_TIMEOUT = config("CATALOGUE_CACHE_TIMEOUT", default=300, cast=int)
ORDER_FLAT_FEE = config("ORDER_FLAT_FEE", default="0")
FUNDS_MINIMUM = config("FUNDS_MINIMUM", default="20")
FUNDS_SURCHARGE = config("FUNDS_SURCHARGE", default="7")
FUNDS_PROCESSING_DELAY = config("FUNDS_PROCESSING_DELAY", default=2, cast=float)

# -------------------------------------------------------------------
# Manual payment + support contacts
# -------------------------------------------------------------------
PAYMENT_NUMBER_NAGAD = config("PAYMENT_NUMBER_NAGAD", default="01792157184")
PAYMENT_NUMBER_BKASH = config("PAYMENT_NUMBER_BKASH", default="01753567152")
PAYMENT_NUMBERS = {
    "nagad": PAYMENT_NUMBER_NAGAD,
    "bkash": PAYMENT_NUMBER_BKASH,
}
SUPPORT_TELEGRAM_URL = config("SUPPORT_TELEGRAM_URL", default="https://t.me/motherpanel")
SUPPORT_WHATSAPP_URL = config("SUPPORT_WHATSAPP_URL", default=f"https://wa.me/88{PAYMENT_NUMBER_NAGAD}")

# -------------------------------------------------------------------
# Auth / profile backend (GoTrue + PostgREST)
# -------------------------------------------------------------------
SUPABASE_URL = config("SUPABASE_URL", default="")
SUPABASE_ANON_KEY = config("SUPABASE_ANON_KEY", default="")
AUTH_ANONYMOUS_MODE = config("AUTH_ANONYMOUS_MODE", default="stored")  # stored | native
BACKEND_TIMEOUT_CONNECT = config("BACKEND_TIMEOUT_CONNECT", default=5, cast=float)
BACKEND_TIMEOUT_READ = config("BACKEND_TIMEOUT_READ", default=15, cast=float)

# -------------------------------------------------------------------
# Logging (provider/backend I/O goes through core.logging masking)
# -------------------------------------------------------------------
LOG_LEVEL = config("LOG_LEVEL", default="DEBUG" if DEBUG else "INFO")
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "app": {
            "format": "[{levelname}] {asctime} {name} - {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "app",
        },
    },
    "root": {"handlers": ["console"], "level": LOG_LEVEL},
    "loggers": {
        "django.request": {"level": "WARNING"},
        "urllib3": {"level": "WARNING"},
    },
}
