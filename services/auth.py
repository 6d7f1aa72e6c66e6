"""Authentication, password reset and profile updates."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Mapping

from models import db
from models.user import APPROVED, PENDING, REJECTED, TIMEZONES, User, utcnow
from utils.request_validation import parse_id

from .errors import (
    DeliveryError,
    InvalidCredentials,
    InvalidResetToken,
    NotFoundError,
    NotVerified,
    PendingApproval,
    Rejected,
    UserNotFound,
    ValidationError,
    WeakPassword,
)
from .notifications import Notifier
from .security import (
    generate_opaque_token,
    issue_session_token,
    read_session_token,
)

logger = logging.getLogger(__name__)

GENERIC_RESET_MESSAGE = (
    "If an account with that email exists, we've sent a password reset link."
)
PROFILE_TEXT_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "phone": "phone",
}


class AuthService:
    def __init__(
        self,
        notifier: Notifier,
        *,
        session_ttl: timedelta,
        reset_ttl: timedelta,
        min_password_length: int = 6,
    ):
        self.notifier = notifier
        self.session_ttl = session_ttl
        self.reset_ttl = reset_ttl
        self.min_password_length = min_password_length

    def login(self, email: str, password: str) -> tuple[str, User]:
        """Check credentials and approval state, then issue a session token.

        Unknown emails and wrong passwords share one error. The approval
        checks run only after the password matched.
        """

        user = User.find_by_email(email)
        if user is None or not user.check_password(password):
            raise InvalidCredentials()

        if user.verification_status == PENDING:
            raise PendingApproval(verificationStatus=PENDING)
        if user.verification_status == REJECTED:
            raise Rejected(verificationStatus=REJECTED)
        if not user.is_email_verified:
            raise NotVerified(verificationStatus="not_verified")

        token = issue_session_token(user.id, self.session_ttl)
        logger.info("User %s logged in", user.id)
        return token, user

    def authenticate(self, token: str | None) -> User:
        """Resolve the user behind a bearer session token."""

        return self.load_user(read_session_token(token))

    def load_user(self, user_id: int) -> User:
        """Return the user a verified session belongs to."""

        user = db.session.get(User, user_id)
        if user is None:
            raise UserNotFound()
        return user

    def logout(self) -> str:
        # Tokens are stateless; the client discards its copy.
        return "Logout successful"

    def forgot_password(self, email: str) -> str:
        if not email:
            raise ValidationError("Please provide email address.")

        user = User.find_by_email(email)
        if user is None:
            return GENERIC_RESET_MESSAGE
        if user.verification_status != APPROVED or not user.is_email_verified:
            logger.info("Password reset requested for unverified user %s", user.id)
            return GENERIC_RESET_MESSAGE

        reset_token = generate_opaque_token()
        user.password_reset_token = reset_token
        user.password_reset_expires = utcnow() + self.reset_ttl
        db.session.commit()

        try:
            self.notifier.send_password_reset(user, reset_token)
        except DeliveryError:
            user.clear_password_reset()
            db.session.commit()
            raise

        logger.info("Password reset link issued for user %s", user.id)
        return GENERIC_RESET_MESSAGE

    def reset_password(self, token: str, password: str) -> None:
        if not token or not password:
            raise ValidationError("Please provide token and new password.")
        if len(password) < self.min_password_length:
            raise WeakPassword(
                f"Password must be at least {self.min_password_length} characters long."
            )

        user = User.query.filter_by(password_reset_token=token).first()
        if user is None or not user.has_valid_reset_token(token):
            raise InvalidResetToken()

        user.set_password(password)
        user.clear_password_reset()
        db.session.commit()
        logger.info("Password reset completed for user %s", user.id)

    def update_profile(self, user_id: Any, fields: Mapping[str, Any]) -> User:
        """Update name, phone and timezone; every other field is ignored."""

        updates = {}
        for key, attribute in PROFILE_TEXT_FIELDS.items():
            value = fields.get(key)
            if isinstance(value, str) and value.strip():
                updates[attribute] = value.strip()

        timezone = fields.get("timezone")
        if isinstance(timezone, str) and timezone.strip():
            timezone = timezone.strip()
            if timezone not in TIMEZONES:
                raise ValidationError(
                    "Timezone must be one of: {}.".format(", ".join(TIMEZONES))
                )
            updates["timezone"] = timezone

        key = parse_id(user_id)
        user = db.session.get(User, key) if key is not None else None
        if user is None:
            raise NotFoundError("User not found.")

        for attribute, value in updates.items():
            setattr(user, attribute, value)
        db.session.commit()
        return user
