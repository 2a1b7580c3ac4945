"""
Subscriptions component.

Double opt-in workflow:
1. validate name/email
2. insert pending subscriber
3. generate and store a confirmation token
4. email the confirmation link

and the confirmation handler that redeems a token.

Each step is fail-fast. Nothing is retried and earlier writes are never
rolled back: a pending subscriber with a stored token may exist even
though the email was never delivered.
"""

from __future__ import annotations

from urllib.parse import urlencode

from mailing_list.components.subscriptions.models import (
    ConfirmInput,
    ConfirmOutput,
    ErrorDetail,
    Outcome,
    StoreError,
    SubscribeInput,
    SubscribeOutput,
    SubscriptionConfig,
    UniquenessViolation,
    UnknownToken,
)
from mailing_list.components.subscriptions.ports import (
    SubscriptionStorePort,
    TokenGeneratorPort,
)
from mailing_list.core.ports.email import EmailError, EmailPort
from mailing_list.domain.subscriber import NewSubscriber, SubscriberValidationError

TOKEN_QUERY_PARAM = "subscription_token"

# --- Pure Functions ---


def build_confirmation_url(base_url: str, token: str, path: str = "/subscriptions/confirm") -> str:
    """
    Build the confirmation link embedded in the email.

    Args:
        base_url: Externally configured application URL
        token: Subscription token
        path: Confirmation endpoint path

    Returns:
        ``{base_url}{path}?subscription_token={token}``
    """
    base = base_url.rstrip("/")
    return f"{base}{path}?{urlencode({TOKEN_QUERY_PARAM: token})}"


def render_confirmation_email(confirmation_url: str) -> tuple[str, str]:
    """Return (html_body, text_body) for the confirmation email."""
    html_body = (
        "Welcome to our newsletter!<br />"
        f'Click <a href="{confirmation_url}">here</a> to confirm your subscription.'
    )
    text_body = (
        "Welcome to our newsletter!\n"
        f"Visit {confirmation_url} to confirm your subscription."
    )
    return html_body, text_body


def _internal_error(code: str, message: str) -> list[ErrorDetail]:
    return [ErrorDetail(code, message)]


# --- Run Handlers ---


def run_subscribe(
    inp: SubscribeInput,
    *,
    store: SubscriptionStorePort,
    email_sender: EmailPort,
    tokens: TokenGeneratorPort,
    config: SubscriptionConfig,
) -> SubscribeOutput:
    """Handle a subscription form submission."""
    try:
        new_subscriber = NewSubscriber.parse(inp.name, inp.email)
    except SubscriberValidationError as e:
        return SubscribeOutput(
            outcome=Outcome.BAD_REQUEST,
            errors=[ErrorDetail(e.code, e.message, e.field)],
        )

    try:
        subscriber_id = store.insert_subscriber(new_subscriber)
    except UniquenessViolation as e:
        if e.field == "email":
            return SubscribeOutput(
                outcome=Outcome.CONFLICT,
                errors=[ErrorDetail("ALREADY_SUBSCRIBED", "Email is already subscribed", "email")],
            )
        return SubscribeOutput(
            outcome=Outcome.INTERNAL_ERROR,
            errors=_internal_error("STORE_ERROR", str(e)),
        )
    except StoreError as e:
        return SubscribeOutput(
            outcome=Outcome.INTERNAL_ERROR,
            errors=_internal_error("STORE_ERROR", str(e)),
        )

    token = tokens.generate()
    try:
        store.store_token(subscriber_id, token)
    except StoreError as e:
        return SubscribeOutput(
            outcome=Outcome.INTERNAL_ERROR,
            subscriber_id=subscriber_id,
            errors=_internal_error("STORE_ERROR", str(e)),
        )

    url = build_confirmation_url(config.base_url, token, config.confirmation_path)
    html_body, text_body = render_confirmation_email(url)

    try:
        result = email_sender.send_email(
            str(new_subscriber.email),
            config.email_subject,
            html_body,
            text_body,
        )
    except EmailError as e:
        return SubscribeOutput(
            outcome=Outcome.INTERNAL_ERROR,
            subscriber_id=subscriber_id,
            errors=_internal_error("EMAIL_DELIVERY_FAILED", str(e)),
        )

    if not result.ok:
        return SubscribeOutput(
            outcome=Outcome.INTERNAL_ERROR,
            subscriber_id=subscriber_id,
            errors=_internal_error("EMAIL_DELIVERY_FAILED", result.error or "delivery failed"),
        )

    return SubscribeOutput(outcome=Outcome.ACCEPTED, subscriber_id=subscriber_id)


def run_confirm(
    inp: ConfirmInput,
    *,
    store: SubscriptionStorePort,
) -> ConfirmOutput:
    """
    Redeem a confirmation token.

    Idempotent: an already confirmed subscriber is reported as success
    with ``already_confirmed`` set.
    """
    token = (inp.token or "").strip()
    if not token:
        return ConfirmOutput(
            outcome=Outcome.BAD_REQUEST,
            errors=[ErrorDetail("MISSING_TOKEN", "Confirmation token is required", TOKEN_QUERY_PARAM)],
        )

    try:
        confirmation = store.confirm_subscriber(token)
    except UnknownToken:
        return ConfirmOutput(
            outcome=Outcome.UNAUTHORIZED,
            errors=[ErrorDetail("UNKNOWN_TOKEN", "Invalid confirmation link")],
        )
    except StoreError as e:
        return ConfirmOutput(
            outcome=Outcome.INTERNAL_ERROR,
            errors=_internal_error("STORE_ERROR", str(e)),
        )

    return ConfirmOutput(
        outcome=Outcome.OK,
        subscriber_id=confirmation.subscriber_id,
        already_confirmed=confirmation.already_confirmed,
    )


def run(
    inp: SubscribeInput | ConfirmInput,
    *,
    store: SubscriptionStorePort,
    email_sender: EmailPort | None = None,
    tokens: TokenGeneratorPort | None = None,
    config: SubscriptionConfig | None = None,
) -> SubscribeOutput | ConfirmOutput:
    """
    Component entry point.

    Subscribe requests need ``email_sender``, ``tokens`` and ``config``;
    confirm requests only need the store.
    """
    if isinstance(inp, SubscribeInput):
        if email_sender is None or tokens is None or config is None:
            raise ValueError("Subscribe requires email_sender, tokens and config")
        return run_subscribe(
            inp,
            store=store,
            email_sender=email_sender,
            tokens=tokens,
            config=config,
        )
    elif isinstance(inp, ConfirmInput):
        return run_confirm(inp, store=store)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
