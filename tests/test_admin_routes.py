"""Tests for admin-only user review and representative management."""

from __future__ import annotations

import pytest

from helpers import auth_headers, create_representative, create_user
from models import db
from models.representative import Representative
from models.user import User


@pytest.fixture()
def admin_headers(app):
    with app.app_context():
        admin_id = create_user("admin@example.com", is_admin=True).id
    return auth_headers(app, admin_id)


ADMIN_ROUTES = [
    ("get", "/api/admin/representatives"),
    ("post", "/api/admin/seed-representatives"),
    ("get", "/api/admin/users"),
    ("get", "/api/admin/pending-users"),
    ("post", "/api/admin/verify-user"),
    ("post", "/api/admin/assign-representative"),
]


@pytest.mark.parametrize("method, path", ADMIN_ROUTES)
def test_admin_routes_require_admin(app, client, method, path):
    with app.app_context():
        member_id = create_user("member@example.com").id

    anonymous = getattr(client, method)(path)
    member = getattr(client, method)(path, headers=auth_headers(app, member_id))

    assert anonymous.status_code == 401
    assert member.status_code == 403
    assert member.get_json()["code"] == "AuthorizationError"


def test_seed_representatives_only_once(app, client, admin_headers):
    first = client.post("/api/admin/seed-representatives", headers=admin_headers)
    assert first.status_code == 201
    assert len(first.get_json()["representatives"]) == 5

    second = client.post("/api/admin/seed-representatives", headers=admin_headers)
    assert second.status_code == 400
    assert second.get_json()["code"] == "AlreadySeeded"

    with app.app_context():
        assert Representative.query.count() == 5


def test_seed_refuses_when_any_representative_exists(app, client, admin_headers):
    with app.app_context():
        create_representative("Solo", "solo@example.com", active=False)

    response = client.post("/api/admin/seed-representatives", headers=admin_headers)

    assert response.status_code == 400
    with app.app_context():
        assert Representative.query.count() == 1


def test_representatives_lists_active_sorted_by_name(app, client, admin_headers):
    with app.app_context():
        create_representative("Zed", "zed@example.com")
        create_representative("Amy", "amy@example.com")
        create_representative("Old", "old@example.com", active=False)

    response = client.get("/api/admin/representatives", headers=admin_headers)

    assert response.status_code == 200
    names = [rep["name"] for rep in response.get_json()["representatives"]]
    assert names == ["Amy", "Zed"]


def test_users_listing_strips_secrets(app, client, admin_headers):
    with app.app_context():
        create_user("pending@example.com", status="pending", verification_token="tok")

    response = client.get("/api/admin/users", headers=admin_headers)

    assert response.status_code == 200
    users = response.get_json()["users"]
    assert {user["email"] for user in users} == {"admin@example.com", "pending@example.com"}
    for user in users:
        assert "passwordHash" not in user
        assert "verificationToken" not in user
        assert "passwordResetToken" not in user


def test_pending_users_include_roster(app, client, admin_headers):
    with app.app_context():
        create_user("pending@example.com", status="pending")
        create_representative("Amy", "amy@example.com")

    response = client.get("/api/admin/pending-users", headers=admin_headers)

    payload = response.get_json()
    assert [user["email"] for user in payload["users"]] == ["pending@example.com"]
    assert [rep["name"] for rep in payload["representatives"]] == ["Amy"]


def test_verify_user_approval_requires_valid_representative(app, client, admin_headers):
    with app.app_context():
        user_id = create_user("pending@example.com", status="pending").id
        rep_id = create_representative("Amy", "amy@example.com").id

    no_rep = client.post(
        "/api/admin/verify-user",
        json={"userId": user_id, "action": "approve"},
        headers=admin_headers,
    )
    assert no_rep.status_code == 400
    assert no_rep.get_json()["code"] == "RepresentativeRequired"

    bad_rep = client.post(
        "/api/admin/verify-user",
        json={"userId": user_id, "action": "approve", "representativeId": 999},
        headers=admin_headers,
    )
    assert bad_rep.status_code == 400
    assert bad_rep.get_json()["code"] == "InvalidRepresentative"

    missing_user = client.post(
        "/api/admin/verify-user",
        json={"userId": 999, "action": "approve", "representativeId": rep_id},
        headers=admin_headers,
    )
    assert missing_user.status_code == 404

    bad_action = client.post(
        "/api/admin/verify-user",
        json={"userId": user_id, "action": "maybe"},
        headers=admin_headers,
    )
    assert bad_action.status_code == 400

    with app.app_context():
        assert db.session.get(User, user_id).verification_status == "pending"


def test_verify_user_approves_and_links_representative(app, client, admin_headers, outbox):
    with app.app_context():
        user_id = create_user("pending@example.com", status="pending").id
        rep_id = create_representative("Amy", "amy@example.com").id

    response = client.post(
        "/api/admin/verify-user",
        json={"userId": str(user_id), "action": "approve", "representativeId": str(rep_id)},
        headers=admin_headers,
    )

    assert response.status_code == 200
    user = response.get_json()["user"]
    assert user["verificationStatus"] == "approved"
    assert user["isEmailVerified"] is True
    assert user["verifiedBy"] == "admin@example.com"
    assert user["assignedRepresentative"]["email"] == "amy@example.com"
    assert "amy@example.com" in outbox[-1].html

    again = client.post(
        "/api/admin/verify-user",
        json={"userId": user_id, "action": "reject"},
        headers=admin_headers,
    )
    assert again.status_code == 400
    assert again.get_json()["code"] == "AlreadyResolved"


def test_verify_user_rejection_needs_no_representative(app, client, admin_headers):
    with app.app_context():
        user_id = create_user("pending@example.com", status="pending").id

    response = client.post(
        "/api/admin/verify-user",
        json={"userId": user_id, "action": "reject"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.get_json()["user"]["verificationStatus"] == "rejected"
    assert response.get_json()["user"]["assignedRepresentative"] is None


def test_assign_representative_ignores_status(app, client, admin_headers):
    with app.app_context():
        user_id = create_user("rejected@example.com", status="rejected").id
        rep_id = create_representative("Amy", "amy@example.com").id

    response = client.post(
        "/api/admin/assign-representative",
        json={"userId": user_id, "representativeId": rep_id},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.get_json()["user"]["assignedRepresentative"]["id"] == rep_id
    with app.app_context():
        user = db.session.get(User, user_id)
        assert user.assigned_representative_id == rep_id
        assert user.verification_status == "rejected"


@pytest.mark.parametrize(
    "body, status_code",
    [
        ({"userId": 1}, 400),
        ({"userId": 999, "representativeId": 1}, 404),
        ({"userId": "admin", "representativeId": 1}, 404),
    ],
)
def test_assign_representative_errors(app, client, admin_headers, body, status_code):
    with app.app_context():
        create_representative("Amy", "amy@example.com")

    response = client.post(
        "/api/admin/assign-representative", json=body, headers=admin_headers
    )

    assert response.status_code == status_code


def test_assign_representative_unknown_representative(app, client, admin_headers):
    with app.app_context():
        user_id = create_user("someone@example.com").id

    response = client.post(
        "/api/admin/assign-representative",
        json={"userId": user_id, "representativeId": 42},
        headers=admin_headers,
    )

    assert response.status_code == 404
    assert response.get_json()["detail"] == "Representative not found."
