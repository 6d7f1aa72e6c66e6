"""Users blueprint: registration, sessions, profile, password reset and contact."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, g, jsonify, request
from werkzeug.exceptions import BadRequest

from models.user import PENDING, User
from services import get_auth_service, get_notifier, get_workflow
from services.contact import submit_contact
from utils.request_validation import get_text, parse_json_request

from .guards import session_required

users_bp = Blueprint("users", __name__)

REGISTRATION_FIELDS = (
    "firstName",
    "lastName",
    "email",
    "password",
    "phone",
    "company",
    "timezone",
)


@users_bp.route("/register", methods=["POST"])
def register():
    """Create a pending account and ask an admin to review it."""

    payload = parse_json_request(request, required_keys=REGISTRATION_FIELDS)
    profile = {key: get_text(payload, key) for key in REGISTRATION_FIELDS if key != "password"}
    password = get_text(payload, "password", strip=False)
    blank = sorted(key for key, value in profile.items() if not value)
    if blank:
        raise BadRequest("Missing required fields: {}.".format(", ".join(blank)))

    user = get_workflow().submit_registration(profile, password)

    return (
        jsonify(
            {
                "message": (
                    "Registration successful! Your account is pending approval. "
                    "You'll receive an email once it's been reviewed."
                ),
                "user": user.to_dict(include_representative=False),
            }
        ),
        HTTPStatus.CREATED,
    )


@users_bp.route("/login", methods=["POST"])
def login():
    payload = parse_json_request(request, allow_empty=True)
    email = get_text(payload, "email")
    password = get_text(payload, "password", strip=False)
    if not email or not password:
        raise BadRequest("Please provide email and password.")

    token, user = get_auth_service().login(email, password)
    return jsonify({"message": "Login successful", "token": token, "user": user.to_dict()})


@users_bp.route("/logout", methods=["POST"])
def logout():
    return jsonify({"message": get_auth_service().logout()})


@users_bp.route("/contact", methods=["POST"])
def contact():
    payload = parse_json_request(request, allow_empty=True)
    message = submit_contact(
        get_notifier(),
        get_text(payload, "email"),
        get_text(payload, "message"),
        get_text(payload, "name") or None,
    )
    return jsonify({"message": message, "success": True})


@users_bp.route("/forgot-password", methods=["POST"])
def forgot_password():
    payload = parse_json_request(request, allow_empty=True)
    message = get_auth_service().forgot_password(get_text(payload, "email"))
    return jsonify({"message": message})


@users_bp.route("/reset-password", methods=["POST"])
def reset_password():
    payload = parse_json_request(request, allow_empty=True)
    get_auth_service().reset_password(
        get_text(payload, "token"),
        get_text(payload, "password", strip=False),
    )
    return jsonify(
        {
            "message": (
                "Password has been reset successfully. "
                "You can now log in with your new password."
            )
        }
    )


@users_bp.route("/admin-verify", methods=["GET"])
def admin_verify():
    """Approve or reject a registration from the links in the review email."""

    token = (request.args.get("token") or "").strip()
    action = (request.args.get("action") or "").strip()
    if not token or not action:
        raise BadRequest("Missing token or action parameter.")

    user = get_workflow().resolve_by_token(
        token,
        action,
        representative_id=request.args.get("representativeId"),
    )
    return jsonify(
        {
            "message": f"User {user.verification_status} successfully.",
            "user": user.to_dict(),
        }
    )


@users_bp.route("/check-auth", methods=["GET"])
@session_required
def check_auth():
    return jsonify({"message": "User is authenticated", "user": g.current_user.to_dict()})


@users_bp.route("/profile", methods=["GET"])
@session_required
def get_profile():
    return jsonify(g.current_user.to_dict())


@users_bp.route("/profile", methods=["PUT"])
@session_required
def update_profile():
    payload = parse_json_request(request, allow_empty=True)
    user = get_auth_service().update_profile(g.current_user.id, payload)
    return jsonify({"message": "Profile updated successfully", "user": user.to_dict()})


@users_bp.route("/pending-users", methods=["GET"])
@session_required
def pending_users():
    users = (
        User.query.filter_by(verification_status=PENDING)
        .order_by(User.created_at.desc(), User.id.desc())
        .all()
    )
    return jsonify(
        {
            "message": "Pending users retrieved successfully",
            "count": len(users),
            "users": [user.to_dict() for user in users],
        }
    )


@users_bp.route("/manual-verify", methods=["POST"])
@session_required
def manual_verify():
    payload = parse_json_request(request, required_keys=("userId", "action"))

    user = get_workflow().resolve_by_admin_decision(
        payload["userId"],
        payload["action"],
        actor=g.current_user.email,
        representative_id=payload.get("representativeId"),
        require_representative=False,
    )
    return jsonify(
        {
            "message": f"User {user.verification_status} successfully",
            "user": user.to_dict(),
        }
    )
