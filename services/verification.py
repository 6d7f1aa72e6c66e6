"""Verification workflow: registration and the pending → approved/rejected transition."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from models import db
from models.representative import Representative
from models.user import APPROVED, PENDING, REJECTED, TIMEZONES, User, utcnow
from utils.request_validation import parse_id

from .errors import (
    AlreadyResolved,
    DuplicateEmail,
    InvalidRepresentative,
    NotFoundError,
    RepresentativeRequired,
    ValidationError,
)
from .notifications import Notifier
from .security import generate_opaque_token

logger = logging.getLogger(__name__)

ACTIONS = {"approve": APPROVED, "reject": REJECTED}


def parse_action(action: Any) -> str:
    """Validate an approve/reject action and return it."""

    if action not in ACTIONS:
        raise ValidationError('Invalid action. Must be "approve" or "reject".')
    return action


class VerificationWorkflow:
    """Owns a user's path from registration to approved or rejected.

    ``system_actor`` is the identity recorded for decisions taken through the
    emailed approve/reject links, where no admin session is available.
    """

    def __init__(self, notifier: Notifier, *, system_actor: str):
        self.notifier = notifier
        self.system_actor = system_actor

    def submit_registration(self, profile: Mapping[str, Any], password: str) -> User:
        timezone = (profile.get("timezone") or "").strip()
        if timezone not in TIMEZONES:
            raise ValidationError(
                "Timezone must be one of: {}.".format(", ".join(TIMEZONES))
            )

        email = profile.get("email")
        if User.find_by_email(email) is not None:
            raise DuplicateEmail()

        verification_token = generate_opaque_token()
        user = User(
            first_name=profile["firstName"].strip(),
            last_name=profile["lastName"].strip(),
            email=email,
            phone=profile["phone"].strip(),
            company=profile["company"].strip(),
            timezone=timezone,
            verification_status=PENDING,
            is_email_verified=False,
            verification_token=verification_token,
        )
        user.set_password(password)

        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            raise DuplicateEmail() from exc

        logger.info("Registered user %s pending approval", user.id)
        self.notifier.request_admin_review(user, verification_token)
        return user

    def resolve_by_token(
        self,
        token: str,
        action: str,
        representative_id: Any = None,
    ) -> User:
        """Apply a decision taken from the emailed review links."""

        parse_action(action)
        user = User.query.filter_by(verification_token=token).first() if token else None
        if user is None:
            raise NotFoundError("Invalid verification token or user not found.")
        self._ensure_pending(user)

        representative = None
        if action == "approve" and representative_id:
            representative = self._get_representative(representative_id)

        return self._transition(user, action, self.system_actor, representative)

    def resolve_by_admin_decision(
        self,
        user_id: Any,
        action: str,
        actor: str,
        representative_id: Any = None,
        *,
        require_representative: bool = True,
    ) -> User:
        """Apply a decision taken by a signed-in admin."""

        parse_action(action)
        if action == "approve" and require_representative and not representative_id:
            raise RepresentativeRequired()

        user = _get_user(user_id)
        self._ensure_pending(user)

        representative = None
        if action == "approve" and representative_id:
            representative = self._get_representative(representative_id)

        return self._transition(user, action, actor, representative)

    def assign_representative(self, user_id: Any, representative_id: Any) -> User:
        """Link a representative to a user regardless of verification status."""

        user = _get_user(user_id)
        representative = _get_representative_or_404(representative_id)

        user.assigned_representative = representative
        db.session.commit()
        logger.info("Assigned representative %s to user %s", representative.id, user.id)
        return user

    def _transition(
        self,
        user: User,
        action: str,
        actor: str,
        representative: Representative | None,
    ) -> User:
        values = {
            "verification_status": ACTIONS[action],
            "is_email_verified": action == "approve",
            "verified_by": actor,
            "verified_at": utcnow(),
            "verification_token": None,
        }
        if representative is not None:
            values["assigned_representative_id"] = representative.id

        # Only a still-pending row is written; a concurrent resolution loses.
        result = db.session.execute(
            update(User)
            .where(User.id == user.id, User.verification_status == PENDING)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            db.session.rollback()
            current = db.session.scalar(
                select(User.verification_status).where(User.id == user.id)
            )
            raise AlreadyResolved(f"User has already been {current}.")
        db.session.commit()
        db.session.refresh(user)

        logger.info("User %s %s by %s", user.id, user.verification_status, actor)
        self.notifier.announce_decision(user, actor, user.assigned_representative)
        return user

    @staticmethod
    def _ensure_pending(user: User) -> None:
        if not user.is_pending:
            raise AlreadyResolved(f"User has already been {user.verification_status}.")

    @staticmethod
    def _get_representative(representative_id: Any) -> Representative:
        key = parse_id(representative_id)
        representative = db.session.get(Representative, key) if key is not None else None
        if representative is None:
            raise InvalidRepresentative()
        return representative


def _get_user(user_id: Any) -> User:
    key = parse_id(user_id)
    user = db.session.get(User, key) if key is not None else None
    if user is None:
        raise NotFoundError("User not found.")
    return user


def _get_representative_or_404(representative_id: Any) -> Representative:
    key = parse_id(representative_id)
    representative = db.session.get(Representative, key) if key is not None else None
    if representative is None:
        raise NotFoundError("Representative not found.")
    return representative
