"""Service error taxonomy.

Every error is a :class:`werkzeug.exceptions.HTTPException` so the JSON error
handler registered by the application factory can render it directly. The
class name is exposed as ``code`` in the response body; ``payload`` carries
extra fields merged into the body.
"""

from __future__ import annotations

from typing import Any

from werkzeug.exceptions import HTTPException


class ServiceError(HTTPException):
    """Base class for errors raised by the service layer."""

    code = 500
    description = "The request could not be completed."

    def __init__(self, description: str | None = None, **payload: Any):
        super().__init__(description)
        self.payload = payload


class ValidationError(ServiceError):
    code = 400
    description = "The request is missing or has malformed input."


class RepresentativeRequired(ValidationError):
    description = "Representative must be assigned when approving user."


class InvalidRepresentative(ValidationError):
    description = "Invalid representative."


class WeakPassword(ValidationError):
    description = "Password is too short."


class InvalidResetToken(ValidationError):
    description = "Invalid or expired password reset token."


class ConflictError(ServiceError):
    code = 400
    description = "The request conflicts with the current state."


class DuplicateEmail(ConflictError):
    description = "User already exists with this email."


class AlreadyResolved(ConflictError):
    description = "User has already been verified."


class AlreadySeeded(ConflictError):
    description = "Representatives already exist."


class AuthenticationError(ServiceError):
    code = 401
    description = "Authentication required."


class InvalidCredentials(AuthenticationError):
    description = "Invalid email or password."


class PendingApproval(AuthenticationError):
    description = "Your account is pending approval. Please wait for admin verification."


class Rejected(AuthenticationError):
    description = "Your account registration has been rejected. Please contact support."


class NotVerified(AuthenticationError):
    description = "Your account has not been verified. Please contact support."


class InvalidOrExpiredToken(AuthenticationError):
    description = "Invalid or expired token."


class UserNotFound(AuthenticationError):
    description = "User not found."


class AuthorizationError(ServiceError):
    code = 403
    description = "Admin access required."


class NotFoundError(ServiceError):
    code = 404
    description = "Resource not found."


class DependencyError(ServiceError):
    code = 500
    description = "A required downstream service failed."


class DeliveryError(DependencyError):
    description = "Failed to send email. Please try again."
