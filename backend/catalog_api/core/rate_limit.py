"""
Shared slowapi limiter.

Lives outside ``catalog_api.main`` so routers can decorate endpoints without
importing the application module.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from catalog_api.config import Settings, settings as default_settings

limiter = Limiter(key_func=get_remote_address)

_limits = {"login": default_settings.LOGIN_RATE_LIMIT}


def configure_limiter(settings: Settings) -> Limiter:
    """Apply the settings of the application being built to the shared limiter."""
    limiter.enabled = settings.RATE_LIMIT_ENABLED
    _limits["login"] = settings.LOGIN_RATE_LIMIT
    return limiter


def login_rate_limit() -> str:
    return _limits["login"]
