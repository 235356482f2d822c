"""Startup validation — catch misconfigurations before the app serves traffic."""
from __future__ import annotations

import logging
import sys
from urllib.parse import urlparse

from config.settings import settings

logger = logging.getLogger(__name__)

_DEV_SECRET = "netdash-dev-secret-change-in-prod"


def validate_settings() -> list[str]:
    """Validate configuration. Returns list of warnings (empty = all good).

    Raises SystemExit for critical misconfigurations in production.
    """
    warnings: list[str] = []
    is_prod = settings.SENTRY_ENVIRONMENT == "production"

    # Critical: JWT secret must be changed in production
    if is_prod and settings.REQUIRE_AUTH and settings.JWT_SECRET == _DEV_SECRET:
        logger.critical("JWT_SECRET is still the default! Set a real secret for production.")
        sys.exit(1)

    if is_prod and "*" in settings.CORS_ORIGINS:
        warnings.append("CORS_ORIGINS is set to * — restrict in production")

    if not settings.REQUIRE_AUTH:
        warnings.append("REQUIRE_AUTH is off — every route is reachable without a token")

    if not settings.EF_API_KEY:
        warnings.append("EF_API_KEY not set — every resource will be served from mock data")

    for name in ("EF_API_URL", "EF_URL_AFFILIATE"):
        url = getattr(settings, name)
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            warnings.append(f"{name} is not an absolute http(s) URL: {url!r}")

    if settings.UPSTREAM_TIMEOUT_SECONDS <= 0:
        warnings.append("UPSTREAM_TIMEOUT_SECONDS must be positive — upstream calls will fail immediately")

    for w in warnings:
        logger.warning("⚠️  %s", w)

    if not warnings:
        logger.info("✅ All startup checks passed")

    return warnings
