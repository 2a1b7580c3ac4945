from mailing_list.settings.loader import env_overrides, load_settings
from mailing_list.settings.models import (
    ApplicationSettings,
    DatabaseSettings,
    EmailClientSettings,
    LoggingSettings,
    Settings,
    SubscriptionSettings,
)

__all__ = [
    "ApplicationSettings",
    "DatabaseSettings",
    "EmailClientSettings",
    "LoggingSettings",
    "Settings",
    "SubscriptionSettings",
    "env_overrides",
    "load_settings",
]
