from mailing_list.domain.subscriber import (
    EMAIL_REGEX,
    MAX_EMAIL_LENGTH,
    MAX_NAME_LENGTH,
    NewSubscriber,
    SubscriberEmail,
    SubscriberName,
    SubscriberValidationError,
)

__all__ = [
    "EMAIL_REGEX",
    "MAX_EMAIL_LENGTH",
    "MAX_NAME_LENGTH",
    "NewSubscriber",
    "SubscriberEmail",
    "SubscriberName",
    "SubscriberValidationError",
]
