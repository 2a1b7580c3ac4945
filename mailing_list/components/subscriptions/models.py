"""
Subscriptions component models.

Data models for the double opt-in subscription flow.

State machine (Subscriber): pending_confirmation → confirmed
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID

# --- State Machine ---


class SubscriptionStatus(Enum):
    """
    Subscriber status.

    State transitions:
    - pending_confirmation → confirmed (via confirmation link)
    - confirmed is terminal
    """

    PENDING_CONFIRMATION = "pending_confirmation"
    CONFIRMED = "confirmed"


VALID_TRANSITIONS: dict[SubscriptionStatus, set[SubscriptionStatus]] = {
    SubscriptionStatus.PENDING_CONFIRMATION: {SubscriptionStatus.CONFIRMED},
    SubscriptionStatus.CONFIRMED: set(),
}


def can_transition(from_status: SubscriptionStatus, to_status: SubscriptionStatus) -> bool:
    """Check if a status transition is allowed."""
    return to_status in VALID_TRANSITIONS.get(from_status, set())


# --- Entities ---


@dataclass(frozen=True)
class Subscriber:
    id: UUID
    email: str
    name: str
    subscribed_at: datetime
    status: SubscriptionStatus = SubscriptionStatus.PENDING_CONFIRMATION


@dataclass(frozen=True)
class SubscriptionToken:
    subscription_token: str
    subscriber_id: UUID


@dataclass(frozen=True)
class Confirmation:
    """Result of redeeming a token in the store."""

    subscriber_id: UUID
    already_confirmed: bool = False


# --- Outcomes ---


class Outcome(Enum):
    """Request-level outcome, mapped to an HTTP status by the API layer."""

    ACCEPTED = "accepted"
    OK = "ok"
    BAD_REQUEST = "bad_request"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    INTERNAL_ERROR = "internal_error"


# --- Input Models ---


@dataclass(frozen=True)
class SubscribeInput:
    """Raw form submission."""

    name: str | None
    email: str | None


@dataclass(frozen=True)
class ConfirmInput:
    """Token taken from the confirmation link."""

    token: str | None


# --- Output Models ---


@dataclass(frozen=True)
class ErrorDetail:
    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class SubscribeOutput:
    outcome: Outcome
    subscriber_id: UUID | None = None
    errors: list[ErrorDetail] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.outcome == Outcome.ACCEPTED


@dataclass(frozen=True)
class ConfirmOutput:
    outcome: Outcome
    subscriber_id: UUID | None = None
    errors: list[ErrorDetail] = field(default_factory=list)
    already_confirmed: bool = False  # Idempotent success

    @property
    def success(self) -> bool:
        return self.outcome == Outcome.OK


# --- Configuration ---


@dataclass(frozen=True)
class SubscriptionConfig:
    """Settings the workflow needs; base_url is always injected."""

    base_url: str
    confirmation_path: str = "/subscriptions/confirm"
    email_subject: str = "Welcome!"


# --- Error Types ---


class SubscriptionError(Exception):
    """Base subscription error."""


class StoreError(SubscriptionError):
    """Subscription store operation failed."""


class UniquenessViolation(StoreError):
    """A unique key (email or token) already exists."""

    def __init__(self, field: str, value: str | None = None) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Duplicate value for unique field '{field}'")


class UnknownSubscriber(StoreError):
    def __init__(self, subscriber_id: UUID) -> None:
        self.subscriber_id = subscriber_id
        super().__init__(f"Subscriber {subscriber_id} does not exist")


class UnknownToken(StoreError):
    def __init__(self) -> None:
        super().__init__("Subscription token not found")


class StoreUnavailable(StoreError):
    """Connectivity or transient storage failure."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Subscription store unavailable: {reason}")
