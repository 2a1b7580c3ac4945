"""
Subscription endpoints.

Endpoints:
- POST /subscriptions - Start the double opt-in flow (form: name, email)
- GET /subscriptions/confirm - Redeem the emailed confirmation token

Response bodies never carry internal error detail; failures are logged
with the subscriber email and request id instead.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Form, HTTPException, Query, status
from pydantic import BaseModel

from mailing_list.adapters.sqlite.store import SQLiteSubscriptionStore
from mailing_list.api.deps import (
    get_email_adapter,
    get_subscription_config,
    get_subscription_store,
    get_token_generator,
)
from mailing_list.components.subscriptions import (
    ConfirmInput,
    Outcome,
    SubscribeInput,
    SubscriptionConfig,
    TokenGenerator,
    run_confirm,
    run_subscribe,
)
from mailing_list.core.ports.email import EmailPort
from mailing_list.domain import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH

logger = logging.getLogger(__name__)

router = APIRouter()

OUTCOME_STATUS: dict[Outcome, int] = {
    Outcome.ACCEPTED: status.HTTP_200_OK,
    Outcome.OK: status.HTTP_200_OK,
    Outcome.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    Outcome.CONFLICT: status.HTTP_409_CONFLICT,
    Outcome.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    Outcome.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

PUBLIC_DETAIL: dict[Outcome, str] = {
    Outcome.BAD_REQUEST: "Invalid request",
    Outcome.CONFLICT: "Email is already subscribed",
    Outcome.UNAUTHORIZED: "Invalid confirmation link",
    Outcome.INTERNAL_ERROR: "Internal server error",
}


def _clip(value: str | None, limit: int) -> str | None:
    """Bound raw form input before it reaches the logs."""
    if value is None or len(value) <= limit:
        return value
    return value[:limit] + "..."


class SubscribeResponse(BaseModel):
    success: bool
    message: str


class ConfirmResponse(BaseModel):
    success: bool
    message: str


class ErrorResponse(BaseModel):
    detail: str


def _raise_for_outcome(outcome: Outcome, detail: str | None = None) -> None:
    raise HTTPException(
        status_code=OUTCOME_STATUS[outcome],
        detail=detail or PUBLIC_DETAIL.get(outcome, "Request failed"),
    )


@router.post(
    "/subscriptions",
    response_model=SubscribeResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid name or email"},
        409: {"model": ErrorResponse, "description": "Email already subscribed"},
        500: {"model": ErrorResponse, "description": "Store or email failure"},
    },
    summary="Subscribe to the mailing list",
)
def subscribe(
    name: Annotated[str | None, Form()] = None,
    email: Annotated[str | None, Form()] = None,
    store: SQLiteSubscriptionStore = Depends(get_subscription_store),
    email_sender: EmailPort = Depends(get_email_adapter),
    tokens: TokenGenerator = Depends(get_token_generator),
    config: SubscriptionConfig = Depends(get_subscription_config),
) -> SubscribeResponse:
    """Create a pending subscriber and email the confirmation link."""
    log_email = _clip(email, MAX_EMAIL_LENGTH)
    logger.info(
        "Adding a new subscriber",
        extra={"subscriber_email": log_email, "subscriber_name": _clip(name, MAX_NAME_LENGTH)},
    )

    result = run_subscribe(
        SubscribeInput(name=name, email=email),
        store=store,
        email_sender=email_sender,
        tokens=tokens,
        config=config,
    )

    if result.outcome == Outcome.BAD_REQUEST:
        error = result.errors[0] if result.errors else None
        logger.info("Rejected subscription for %s: %s", log_email, error.code if error else "invalid")
        _raise_for_outcome(result.outcome, error.message if error else None)

    if not result.success:
        codes = ",".join(e.code for e in result.errors)
        logger.error(
            "Subscription for %s failed: %s",
            log_email,
            "; ".join(e.message for e in result.errors),
            extra={"subscriber_email": log_email, "error_codes": codes},
        )
        _raise_for_outcome(result.outcome)

    return SubscribeResponse(
        success=True,
        message="Please check your email to confirm your subscription",
    )


@router.get(
    "/subscriptions/confirm",
    response_model=ConfirmResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing token"},
        401: {"model": ErrorResponse, "description": "Unknown token"},
        500: {"model": ErrorResponse, "description": "Store failure"},
    },
    summary="Confirm a pending subscriber",
)
def confirm(
    subscription_token: Annotated[str | None, Query()] = None,
    store: SQLiteSubscriptionStore = Depends(get_subscription_store),
) -> ConfirmResponse:
    """Transition the subscriber bound to the token to confirmed."""
    result = run_confirm(ConfirmInput(token=subscription_token), store=store)

    if not result.success:
        if result.outcome == Outcome.INTERNAL_ERROR:
            logger.error(
                "Confirmation failed: %s", "; ".join(e.message for e in result.errors)
            )
        else:
            logger.info("Rejected confirmation: %s", result.errors[0].code if result.errors else "-")
        _raise_for_outcome(result.outcome)

    if result.already_confirmed:
        return ConfirmResponse(success=True, message="Your subscription was already confirmed")

    logger.info("Confirmed subscriber %s", result.subscriber_id)
    return ConfirmResponse(success=True, message="Your subscription is now confirmed. Welcome!")
