"""
Subscriptions component ports.

Protocol interfaces for the workflow's dependencies. The email port is
shared and lives in ``mailing_list.core.ports.email``.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from mailing_list.components.subscriptions.models import (
    Confirmation,
    Subscriber,
    SubscriptionToken,
)
from mailing_list.domain.subscriber import NewSubscriber


class SubscriptionStorePort(Protocol):
    """
    Durable record of subscribers and their confirmation tokens.

    Every write is committed before the call returns. Failures are raised
    as StoreError subclasses.
    """

    def insert_subscriber(self, new_subscriber: NewSubscriber) -> UUID:
        """
        Create a pending subscriber.

        Raises:
            UniquenessViolation: email already exists
            StoreUnavailable: connectivity/transient failure
        """
        ...

    def store_token(self, subscriber_id: UUID, token: str) -> None:
        """
        Bind a token to a subscriber.

        Raises:
            UniquenessViolation: token already exists
            UnknownSubscriber: no subscriber with that id
            StoreUnavailable: connectivity/transient failure
        """
        ...

    def confirm_subscriber(self, token: str) -> Confirmation:
        """
        Mark the subscriber bound to ``token`` as confirmed.

        Idempotent for an already confirmed subscriber; the returned
        Confirmation reports whether it was confirmed before this call.

        Raises:
            UnknownToken: no such token
            StoreUnavailable: connectivity/transient failure
        """
        ...

    def get_subscriber(self, subscriber_id: UUID) -> Subscriber | None:
        ...

    def get_subscriber_by_email(self, email: str) -> Subscriber | None:
        ...

    def list_tokens(self, subscriber_id: UUID) -> list[SubscriptionToken]:
        ...


class TokenGeneratorPort(Protocol):
    def generate(self) -> str:
        """Return a fresh single-use subscription token."""
        ...
