# Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from mailing_list.core.ports.clock import ClockPort
from mailing_list.core.ports.email import (
    EmailError,
    EmailPort,
    EmailResult,
    EmailSendError,
    EmailStatus,
)

__all__ = [
    "ClockPort",
    "EmailError",
    "EmailPort",
    "EmailResult",
    "EmailSendError",
    "EmailStatus",
]
