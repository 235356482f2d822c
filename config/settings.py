"""App settings — loaded from environment."""
from __future__ import annotations

import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # API
    API_HOST = os.getenv("API_HOST", "0.0.0.0")
    API_PORT = int(os.getenv("API_PORT", "8000"))

    # Affiliate network (upstream); a missing key switches every resource to mock data
    EF_API_KEY = os.getenv("EF_API_KEY", "")
    EF_API_URL = os.getenv("EF_API_URL", "https://api.eflow.team/v1/networks/")
    EF_URL_AFFILIATE = os.getenv("EF_URL_AFFILIATE", "https://api.eflow.team/v1/affiliates/")
    UPSTREAM_TIMEOUT_SECONDS = float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "30"))

    # Reporting defaults
    CONVERSIONS_TIMEZONE_ID = int(os.getenv("CONVERSIONS_TIMEZONE_ID", "67"))
    REPORTING_TIMEZONE_ID = int(os.getenv("REPORTING_TIMEZONE_ID", "90"))
    PROFIT_PAGE_SIZE = int(os.getenv("PROFIT_PAGE_SIZE", "1000"))

    # Auth
    JWT_SECRET = os.getenv("JWT_SECRET", "netdash-dev-secret-change-in-prod")
    REQUIRE_AUTH = os.getenv("REQUIRE_AUTH", "true").lower() in ("1", "true", "yes")

    # CORS origins (comma-separated, or * for dev)
    CORS_ORIGINS = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",")
    ]

    # Observability
    SENTRY_DSN = os.getenv("SENTRY_DSN", "")
    SENTRY_ENVIRONMENT = os.getenv("SENTRY_ENVIRONMENT", "development")
    SENTRY_TRACES_SAMPLE_RATE = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1"))

    # Logging
    LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # "text" or "json"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
