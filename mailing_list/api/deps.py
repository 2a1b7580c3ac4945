import threading
from functools import lru_cache

from fastapi import Depends

from mailing_list.adapters.dev_email import DevEmailAdapter
from mailing_list.adapters.http_email import HttpEmailAdapter
from mailing_list.adapters.sqlite.store import SQLiteSubscriptionStore
from mailing_list.components.subscriptions import SubscriptionConfig, TokenGenerator
from mailing_list.core.ports.email import EmailPort
from mailing_list.settings import Settings, load_settings


# --- Settings ---
@lru_cache
def get_settings() -> Settings:
    return load_settings()


# --- Store ---
def get_subscription_store(settings: Settings = Depends(get_settings)) -> SQLiteSubscriptionStore:
    return SQLiteSubscriptionStore(
        settings.database.path,
        timeout_seconds=settings.database.timeout_seconds,
    )


# --- Email ---
_email_adapter_instance: EmailPort | None = None
_email_adapter_lock = threading.Lock()


def build_email_adapter(settings: Settings) -> EmailPort:
    cfg = settings.email_client
    if cfg.provider == "http":
        return HttpEmailAdapter(
            base_url=cfg.base_url,
            sender=cfg.sender_email,
            authorization_token=cfg.authorization_token,
            timeout_seconds=cfg.timeout_seconds,
        )
    return DevEmailAdapter()


def get_email_adapter(settings: Settings = Depends(get_settings)) -> EmailPort:
    """Get email adapter singleton (keeps the HTTP connection pool alive)."""
    global _email_adapter_instance
    with _email_adapter_lock:
        if _email_adapter_instance is None:
            _email_adapter_instance = build_email_adapter(settings)
        return _email_adapter_instance


def reset_email_adapter() -> None:
    global _email_adapter_instance
    with _email_adapter_lock:
        if isinstance(_email_adapter_instance, HttpEmailAdapter):
            _email_adapter_instance.close()
        _email_adapter_instance = None


# --- Component collaborators ---
def get_token_generator(settings: Settings = Depends(get_settings)) -> TokenGenerator:
    return TokenGenerator(length=settings.subscriptions.token_length)


def get_subscription_config(settings: Settings = Depends(get_settings)) -> SubscriptionConfig:
    return SubscriptionConfig(
        base_url=settings.application.base_url,
        confirmation_path=settings.subscriptions.confirmation_path,
        email_subject=settings.subscriptions.email_subject,
    )
