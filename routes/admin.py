"""Admin blueprint: user review and representative management."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, g, jsonify, request
from werkzeug.exceptions import BadRequest

from models.user import PENDING, User
from services import get_workflow
from services.representatives import list_active_representatives, seed_representatives
from utils.request_validation import parse_json_request

from .guards import require_admin

admin_bp = Blueprint("admin", __name__)


@admin_bp.before_request
def _require_admin():
    require_admin()


@admin_bp.route("/representatives", methods=["GET"])
def representatives():
    roster = list_active_representatives()
    return jsonify(
        {
            "message": "Representatives retrieved successfully",
            "representatives": [rep.to_dict() for rep in roster],
        }
    )


@admin_bp.route("/seed-representatives", methods=["POST"])
def seed():
    created = seed_representatives()
    return (
        jsonify(
            {
                "message": "Representatives created successfully",
                "representatives": [rep.to_dict() for rep in created],
            }
        ),
        HTTPStatus.CREATED,
    )


@admin_bp.route("/users", methods=["GET"])
def users():
    everyone = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    return jsonify(
        {
            "message": "Users retrieved successfully",
            "users": [user.to_dict() for user in everyone],
        }
    )


@admin_bp.route("/pending-users", methods=["GET"])
def pending_users():
    pending = (
        User.query.filter_by(verification_status=PENDING)
        .order_by(User.created_at.desc(), User.id.desc())
        .all()
    )
    roster = list_active_representatives()
    return jsonify(
        {
            "message": "Pending users and representatives retrieved successfully",
            "users": [user.to_dict() for user in pending],
            "representatives": [rep.to_dict() for rep in roster],
        }
    )


@admin_bp.route("/verify-user", methods=["POST"])
def verify_user():
    """Approve (with a representative) or reject a pending user."""

    payload = parse_json_request(request, required_keys=("userId", "action"))

    user = get_workflow().resolve_by_admin_decision(
        payload["userId"],
        payload["action"],
        actor=g.current_user.email,
        representative_id=payload.get("representativeId"),
    )
    return jsonify(
        {
            "message": f"User {user.verification_status} successfully",
            "user": user.to_dict(),
        }
    )


@admin_bp.route("/assign-representative", methods=["POST"])
def assign_representative():
    payload = parse_json_request(request, allow_empty=True)
    user_id = payload.get("userId")
    representative_id = payload.get("representativeId")
    if not user_id or not representative_id:
        raise BadRequest("Missing userId or representativeId.")

    user = get_workflow().assign_representative(user_id, representative_id)
    return jsonify(
        {
            "message": "Representative assigned successfully",
            "user": user.to_dict(),
        }
    )
