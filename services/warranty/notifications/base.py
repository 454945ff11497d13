"""
Notification Port.

Outbound email abstraction. Implementations report delivery as a bool
and never raise to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from shared.logging import get_logger


logger = get_logger(__name__)


class NotificationPort(Protocol):
    """Protocol for sending a formatted email."""

    async def send(self, to_address: str, subject: str, html_body: str) -> bool:
        """Send an email. Returns True when the provider accepted it."""
        ...


@dataclass(frozen=True)
class SentMessage:
    to_address: str
    subject: str
    html_body: str


class MockNotifier:
    """Mock notifier for development: keeps messages in memory."""

    def __init__(self) -> None:
        self.sent: list[SentMessage] = []

    async def send(self, to_address: str, subject: str, html_body: str) -> bool:
        self.sent.append(SentMessage(to_address, subject, html_body))
        logger.info("email_captured", to=to_address, subject=subject)
        return True
