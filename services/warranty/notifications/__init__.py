"""Customer email notifications."""

from services.warranty.notifications.base import (
    MockNotifier,
    NotificationPort,
    SentMessage,
)
from services.warranty.notifications.resend import ResendNotifier
from services.warranty.notifications.templates import DeviceRegistrationEmail

__all__ = [
    "DeviceRegistrationEmail",
    "MockNotifier",
    "NotificationPort",
    "ResendNotifier",
    "SentMessage",
]
