"""Builders shared by the test modules."""

from __future__ import annotations

from flask_jwt_extended import create_access_token

from models import db
from models.representative import Representative
from models.user import User

REGISTRATION = {
    "firstName": "Alice",
    "lastName": "Smith",
    "email": "alice@x.com",
    "password": "secret1",
    "phone": "555-0100",
    "company": "Acme",
    "timezone": "America/Chicago",
}


def create_user(
    email: str,
    password: str = "secret1",
    *,
    status: str = "approved",
    email_verified: bool | None = None,
    is_admin: bool = False,
    verification_token: str | None = None,
) -> User:
    """Persist a user directly, bypassing the registration workflow."""

    if email_verified is None:
        email_verified = status == "approved"
    user = User(
        first_name="Test",
        last_name="User",
        email=email,
        phone="555-0000",
        company="Acme",
        timezone="UTC",
        verification_status=status,
        is_email_verified=email_verified,
        is_admin=is_admin,
        verification_token=verification_token,
    )
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


def create_representative(name: str, email: str, *, active: bool = True) -> Representative:
    representative = Representative(
        name=name, phone="516-555-0000", email=email, is_active=active
    )
    db.session.add(representative)
    db.session.commit()
    return representative


def auth_headers(app, user_id: int) -> dict[str, str]:
    with app.app_context():
        token = create_access_token(identity=str(user_id))
    return {"Authorization": f"Bearer {token}"}
