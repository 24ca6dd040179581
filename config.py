import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./test.db")
    DB_CREATE_TABLES = bool(data.get("DB_CREATE_TABLES", True))
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    ENABLE_SENTRY = data.get("ENABLE_SENTRY", 0)
    DSN_SENTRY = data.get("DSN_SENTRY", "")
    SENTRY_ENVIRONMENT = data.get("SENTRY_ENVIRONMENT", "dev")

    # Plan catalogue (amounts in cents)
    PLAN_PRICING_CENTS = data.get(
        "PLAN_PRICING_CENTS", {"free": 0, "standard": 1900, "enterprise": 9900}
    )
    PLAN_REGISTRATION_LIMITS = data.get(
        "PLAN_REGISTRATION_LIMITS", {"free": 100, "standard": 5000, "enterprise": 50000}
    )
    DEFAULT_CURRENCY = data.get("DEFAULT_CURRENCY", "USD")
    SUBSCRIPTION_PERIOD_DAYS = data.get("SUBSCRIPTION_PERIOD_DAYS", 30)
    UPGRADE_URL = data.get("UPGRADE_URL", "/pricing")

    # Cancellation finalizer
    FINALIZER_ENABLED = bool(data.get("FINALIZER_ENABLED", True))
    FINALIZER_INTERVAL_SECONDS = data.get("FINALIZER_INTERVAL_SECONDS", 3600)  # Hourly
    FINALIZER_NOTIFICATION_WEBHOOK = data.get("FINALIZER_NOTIFICATION_WEBHOOK", None)
    CRON_SECRET = data.get("CRON_SECRET", None)
