"""
Subscriptions component.

Double opt-in mailing list subscription: pending subscriber creation,
confirmation token issuance and the pending → confirmed transition.
"""

from mailing_list.components.subscriptions.component import (
    TOKEN_QUERY_PARAM,
    build_confirmation_url,
    render_confirmation_email,
    run,
    run_confirm,
    run_subscribe,
)
from mailing_list.components.subscriptions.models import (
    VALID_TRANSITIONS,
    Confirmation,
    ConfirmInput,
    ConfirmOutput,
    ErrorDetail,
    Outcome,
    StoreError,
    StoreUnavailable,
    SubscribeInput,
    SubscribeOutput,
    Subscriber,
    SubscriptionConfig,
    SubscriptionError,
    SubscriptionStatus,
    SubscriptionToken,
    UniquenessViolation,
    UnknownSubscriber,
    UnknownToken,
    can_transition,
)
from mailing_list.components.subscriptions.ports import (
    SubscriptionStorePort,
    TokenGeneratorPort,
)
from mailing_list.components.subscriptions.tokens import (
    TOKEN_ALPHABET,
    TOKEN_LENGTH,
    TokenGenerator,
)

__all__ = [
    # Component
    "run",
    "run_subscribe",
    "run_confirm",
    # Pure functions
    "build_confirmation_url",
    "render_confirmation_email",
    "TOKEN_QUERY_PARAM",
    # Tokens
    "TokenGenerator",
    "TOKEN_ALPHABET",
    "TOKEN_LENGTH",
    # Models
    "Subscriber",
    "SubscriptionStatus",
    "SubscriptionToken",
    "Confirmation",
    "VALID_TRANSITIONS",
    "can_transition",
    "SubscriptionConfig",
    # Input/Output
    "SubscribeInput",
    "SubscribeOutput",
    "ConfirmInput",
    "ConfirmOutput",
    "ErrorDetail",
    "Outcome",
    # Errors
    "SubscriptionError",
    "StoreError",
    "UniquenessViolation",
    "UnknownSubscriber",
    "UnknownToken",
    "StoreUnavailable",
    # Ports
    "SubscriptionStorePort",
    "TokenGeneratorPort",
]
