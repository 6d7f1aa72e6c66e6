"""User model definition."""

from datetime import UTC, datetime

from werkzeug.security import check_password_hash, generate_password_hash

from . import db


PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
VERIFICATION_STATUSES = (PENDING, APPROVED, REJECTED)

TIMEZONES = (
    "America/New_York",
    "America/Chicago",
    "America/Denver",
    "America/Los_Angeles",
    "America/Phoenix",
    "America/Anchorage",
    "Pacific/Honolulu",
    "UTC",
)
DEFAULT_TIMEZONE = "America/New_York"


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in DateTime columns."""

    return datetime.now(UTC).replace(tzinfo=None)


class User(db.Model):
    """Represents a registered platform user."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(120), nullable=False)
    last_name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=False)
    company = db.Column(db.String(255), nullable=False)
    timezone = db.Column(
        db.Enum(*TIMEZONES, name="user_timezone"),
        nullable=False,
        default=DEFAULT_TIMEZONE,
    )
    verification_status = db.Column(
        db.Enum(*VERIFICATION_STATUSES, name="verification_status"),
        nullable=False,
        default=PENDING,
        server_default=db.text("'pending'"),
    )
    is_email_verified = db.Column(
        db.Boolean,
        nullable=False,
        default=False,
        server_default=db.false(),
    )
    is_admin = db.Column(
        db.Boolean,
        nullable=False,
        default=False,
        server_default=db.false(),
    )
    verified_by = db.Column(db.String(255), nullable=True)
    verified_at = db.Column(db.DateTime, nullable=True)
    verification_token = db.Column(db.String(64), nullable=True, index=True)
    password_reset_token = db.Column(db.String(64), nullable=True, index=True)
    password_reset_expires = db.Column(db.DateTime, nullable=True)
    assigned_representative_id = db.Column(
        db.Integer,
        db.ForeignKey("representatives.id"),
        nullable=True,
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    assigned_representative = db.relationship("Representative", lazy="joined")

    def __init__(self, **kwargs):
        if kwargs.get("email"):
            kwargs["email"] = normalize_email(kwargs["email"])
        super().__init__(**kwargs)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_pending(self) -> bool:
        return self.verification_status == PENDING

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def has_valid_reset_token(self, token: str, now: datetime | None = None) -> bool:
        """Return True if ``token`` matches the stored, unexpired reset token."""

        if not token or self.password_reset_token != token:
            return False
        if self.password_reset_expires is None:
            return False
        return (now or utcnow()) < self.password_reset_expires

    def clear_password_reset(self) -> None:
        self.password_reset_token = None
        self.password_reset_expires = None

    def to_dict(self, include_representative: bool = True) -> dict:
        """Serialize the user without credentials or one-time tokens."""

        data = {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "company": self.company,
            "timezone": self.timezone,
            "verificationStatus": self.verification_status,
            "isEmailVerified": self.is_email_verified,
            "isAdmin": self.is_admin,
            "verifiedBy": self.verified_by,
            "verifiedAt": self.verified_at.isoformat() if self.verified_at else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
        if include_representative:
            representative = self.assigned_representative
            data["assignedRepresentative"] = (
                representative.to_contact() if representative else None
            )
        return data

    @classmethod
    def find_by_email(cls, email: str | None) -> "User | None":
        """Case-insensitive lookup by email address."""

        normalized = normalize_email(email)
        if not normalized:
            return None
        return cls.query.filter(db.func.lower(cls.email) == normalized).first()

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"


def normalize_email(raw_email: str | None) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""

    return (raw_email or "").strip().lower()
