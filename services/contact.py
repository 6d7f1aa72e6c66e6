"""Public contact form."""

from __future__ import annotations

import re

from models.user import User

from .errors import ValidationError
from .notifications import Notifier

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_MESSAGE_LENGTH = 10

CONTACT_RECEIVED = "Thank you for your message! We'll get back to you soon."


def submit_contact(
    notifier: Notifier,
    email: str,
    message: str,
    name: str | None = None,
) -> str:
    """Forward a visitor's message to the admin and confirm receipt.

    The admin copy must go out; the confirmation to the visitor is
    best-effort.
    """

    if not email or not message:
        raise ValidationError("Please provide both email and message.")
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Please provide a valid email address.")
    message = message.strip()
    if len(message) < MIN_MESSAGE_LENGTH:
        raise ValidationError(
            f"Message must be at least {MIN_MESSAGE_LENGTH} characters long."
        )

    if not name:
        existing = User.find_by_email(email)
        if existing is not None:
            name = existing.full_name

    notifier.forward_contact_message(email, message, name)
    notifier.confirm_contact_message(email, name)
    return CONTACT_RECEIVED
