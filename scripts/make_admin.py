"""Promote an existing user to administrator.

Usage: python scripts/make_admin.py <email>
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app import create_app  # noqa: E402
from models import db  # noqa: E402
from models.user import APPROVED, User, utcnow  # noqa: E402


def make_admin(email: str) -> bool:
    """Grant admin rights; admins are approved so they can sign in."""

    user = User.find_by_email(email)
    if user is None:
        return False

    user.is_admin = True
    if user.verification_status != APPROVED:
        user.verification_status = APPROVED
        user.verified_by = "make_admin"
        user.verified_at = utcnow()
        user.verification_token = None
    user.is_email_verified = True
    db.session.commit()
    return True


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: python scripts/make_admin.py <email>")
        return 1

    app = create_app()
    with app.app_context():
        if not make_admin(args[0]):
            print(f"User not found: {args[0]}")
            return 1
    print(f"User {args[0]} is now an admin")
    return 0


if __name__ == "__main__":
    sys.exit(main())
