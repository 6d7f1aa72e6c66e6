"""Outbound email: SMTP transport and templated notifications."""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Mapping
from urllib.parse import urlencode

from flask import render_template

from models.representative import Representative
from models.user import APPROVED, User

from .errors import DeliveryError

logger = logging.getLogger(__name__)


@dataclass
class OutgoingEmail:
    """A rendered message ready for the transport."""

    recipient: str
    subject: str
    html: str


class Mailer:
    """Send rendered messages over SMTP.

    With ``suppress`` set, messages are appended to :attr:`outbox` instead of
    being sent; the test suite and local development rely on this.
    """

    def __init__(
        self,
        server: str | None,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        default_sender: str | None = None,
        suppress: bool = False,
    ):
        self.server = server
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.default_sender = default_sender or username
        self.suppress = suppress
        self.outbox: list[OutgoingEmail] = []

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "Mailer":
        return cls(
            server=config.get("MAIL_SERVER"),
            port=int(config.get("MAIL_PORT", 587)),
            username=config.get("MAIL_USERNAME"),
            password=config.get("MAIL_PASSWORD"),
            use_tls=bool(config.get("MAIL_USE_TLS", True)),
            default_sender=config.get("MAIL_DEFAULT_SENDER"),
            suppress=bool(config.get("MAIL_SUPPRESS_SEND", False)),
        )

    def send(self, email: OutgoingEmail) -> None:
        if self.suppress:
            self.outbox.append(email)
            logger.info("Suppressed email to %s: %s", email.recipient, email.subject)
            return

        if not self.server or not self.default_sender:
            raise smtplib.SMTPException("Email configuration incomplete")

        msg = MIMEMultipart("alternative")
        msg["From"] = self.default_sender
        msg["To"] = email.recipient
        msg["Subject"] = email.subject
        msg.attach(MIMEText(email.html, "html"))

        with smtplib.SMTP(self.server, self.port, timeout=30) as server:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(msg)
        logger.info("Email sent to %s: %s", email.recipient, email.subject)


class Notifier:
    """Compose and deliver the application's templated emails."""

    def __init__(
        self,
        mailer: Mailer,
        *,
        admin_email: str,
        backend_url: str,
        frontend_url: str,
    ):
        self.mailer = mailer
        self.admin_email = admin_email
        self.backend_url = backend_url.rstrip("/")
        self.frontend_url = frontend_url.rstrip("/")

    def request_admin_review(self, user: User, verification_token: str) -> bool:
        """Ask the admin to approve or reject a new registration."""

        return self._deliver(
            self.admin_email,
            f"New User Registration Requires Verification - {user.full_name}",
            "email/admin_review.html",
            user=user,
            approve_url=self._verify_link(verification_token, "approve"),
            reject_url=self._verify_link(verification_token, "reject"),
            admin_panel_url=f"{self.frontend_url}/admin/pending-verifications",
        )

    def announce_decision(
        self,
        user: User,
        actor: str | None,
        representative: Representative | None = None,
    ) -> bool:
        approved = user.verification_status == APPROVED
        subject = "Account Approved - Welcome!" if approved else "Account Registration Update"
        return self._deliver(
            user.email,
            subject,
            "email/decision.html",
            user=user,
            approved=approved,
            actor=actor,
            representative=representative,
            login_url=f"{self.frontend_url}/login",
        )

    def send_password_reset(self, user: User, reset_token: str) -> bool:
        """Email a reset link. Delivery failure raises :class:`DeliveryError`."""

        return self._deliver(
            user.email,
            "Password Reset Request",
            "email/password_reset.html",
            required=True,
            failure_message="Failed to send password reset email. Please try again.",
            user=user,
            reset_url=f"{self.frontend_url}/reset-password?{urlencode({'token': reset_token})}",
        )

    def forward_contact_message(self, sender: str, message: str, name: str | None) -> bool:
        return self._deliver(
            self.admin_email,
            f"New Contact Form Message from {sender}",
            "email/contact_admin.html",
            required=True,
            failure_message="There was an error sending your message. Please try again.",
            sender=sender,
            message=message,
            name=name,
        )

    def confirm_contact_message(self, sender: str, name: str | None) -> bool:
        return self._deliver(
            sender,
            "Message Received - We'll Get Back to You Soon",
            "email/contact_confirmation.html",
            name=name,
        )

    def _verify_link(self, token: str, action: str) -> str:
        query = urlencode({"token": token, "action": action})
        return f"{self.backend_url}/api/users/admin-verify?{query}"

    def _deliver(
        self,
        recipient: str,
        subject: str,
        template: str,
        *,
        required: bool = False,
        failure_message: str | None = None,
        **context: Any,
    ) -> bool:
        """Render and send a message.

        Failures are logged and reported as ``False``; when ``required`` is
        set they are raised as :class:`DeliveryError` instead.
        """

        try:
            email = OutgoingEmail(
                recipient=recipient,
                subject=subject,
                html=render_template(template, **context),
            )
            self.mailer.send(email)
        except Exception as exc:
            logger.exception("Email to %s failed: %s", recipient, subject)
            if required:
                raise DeliveryError(failure_message) from exc
            return False
        return True
