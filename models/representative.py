"""Representative model definition."""

from datetime import datetime

from . import db
from .user import utcnow


class Representative(db.Model):
    """Staff contact that can be linked to an approved user."""

    __tablename__ = "representatives"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(32), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    is_active = db.Column(
        db.Boolean,
        nullable=False,
        default=True,
        server_default=db.true(),
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __init__(self, **kwargs):
        if kwargs.get("email"):
            kwargs["email"] = kwargs["email"].strip().lower()
        if kwargs.get("name"):
            kwargs["name"] = kwargs["name"].strip()
        super().__init__(**kwargs)

    def to_contact(self) -> dict:
        """Return the public contact card shown to users."""

        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
        }

    def to_dict(self) -> dict:
        data = self.to_contact()
        data["isActive"] = self.is_active
        data["createdAt"] = _isoformat(self.created_at)
        return data

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<Representative {self.email}>"


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
