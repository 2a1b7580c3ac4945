"""
Subscriber value types.

Validated wrappers for the raw name/email submitted by a visitor.
Construction through ``parse`` is the only place invalid input is
rejected; everything downstream holds values that are known to be valid.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass

# RFC 5322 simplified
EMAIL_REGEX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@"
    r"[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)

MAX_NAME_LENGTH = 256
MAX_EMAIL_LENGTH = 254
FORBIDDEN_NAME_CHARACTERS = frozenset('/()"<>\\{}')
# Format characters that occur in ordinary names (joiners in Indic and
# Persian scripts, soft hyphen); every other Cf character is rejected.
ALLOWED_FORMAT_CHARACTERS = frozenset("\u200c\u200d\u00ad")
REJECTED_CATEGORIES = frozenset({"Cc", "Cs", "Co", "Cn"})


def _is_control(c: str) -> bool:
    category = unicodedata.category(c)
    if category == "Cf":
        return c not in ALLOWED_FORMAT_CHARACTERS
    return category in REJECTED_CATEGORIES


class SubscriberValidationError(ValueError):
    """Raw subscriber input failed validation."""

    def __init__(self, field: str, code: str, message: str) -> None:
        self.field = field
        self.code = code
        self.message = message
        super().__init__(f"{field}: {message}")


@dataclass(frozen=True)
class SubscriberName:
    value: str

    @classmethod
    def parse(cls, raw: str | None) -> SubscriberName:
        """
        Validate a display name.

        Rejects empty (after trimming) or over-long names, control
        characters and characters commonly used in markup injection.
        Length is counted in code points.
        """
        name = (raw or "").strip()

        if not name:
            raise SubscriberValidationError("name", "EMPTY_NAME", "Name is required")

        if len(name) > MAX_NAME_LENGTH:
            raise SubscriberValidationError(
                "name",
                "NAME_TOO_LONG",
                f"Name must be {MAX_NAME_LENGTH} characters or less",
            )

        if any(_is_control(c) for c in name):
            raise SubscriberValidationError(
                "name", "INVALID_CHARACTERS", "Name contains control characters"
            )

        if any(c in FORBIDDEN_NAME_CHARACTERS for c in name):
            raise SubscriberValidationError(
                "name", "INVALID_CHARACTERS", "Name contains forbidden characters"
            )

        return cls(name)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SubscriberEmail:
    value: str

    @classmethod
    def parse(cls, raw: str | None) -> SubscriberEmail:
        """Validate and normalize (trim, lowercase) an email address."""
        email = (raw or "").strip().lower()

        if not email:
            raise SubscriberValidationError("email", "EMPTY_EMAIL", "Email address is required")

        if len(email) > MAX_EMAIL_LENGTH:
            raise SubscriberValidationError(
                "email", "EMAIL_TOO_LONG", "Email address is too long"
            )

        if not EMAIL_REGEX.match(email):
            raise SubscriberValidationError("email", "INVALID_FORMAT", "Invalid email format")

        return cls(email)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class NewSubscriber:
    """A validated name/email pair ready to be stored."""

    email: SubscriberEmail
    name: SubscriberName

    @classmethod
    def parse(cls, raw_name: str | None, raw_email: str | None) -> NewSubscriber:
        name = SubscriberName.parse(raw_name)
        email = SubscriberEmail.parse(raw_email)
        return cls(email=email, name=name)
