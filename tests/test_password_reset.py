"""Tests for the forgot/reset password flow."""

from __future__ import annotations

import smtplib
from datetime import timedelta

import pytest

from helpers import create_user
from models import db
from models.user import User, utcnow
from services.auth import GENERIC_RESET_MESSAGE


def _forgot(client, email):
    return client.post("/api/users/forgot-password", json={"email": email})


def test_unknown_and_known_email_get_the_same_answer(app, client, outbox):
    with app.app_context():
        create_user("known@example.com")

    unknown = _forgot(client, "nobody@example.com")
    known = _forgot(client, "known@example.com")

    assert unknown.status_code == known.status_code == 200
    assert unknown.get_json() == known.get_json() == {"message": GENERIC_RESET_MESSAGE}
    assert [email.recipient for email in outbox] == ["known@example.com"]


def test_unapproved_account_gets_no_reset_token(app, client, outbox):
    with app.app_context():
        user_id = create_user("waiting@example.com", status="pending").id

    response = _forgot(client, "waiting@example.com")

    assert response.status_code == 200
    assert response.get_json()["message"] == GENERIC_RESET_MESSAGE
    with app.app_context():
        assert db.session.get(User, user_id).password_reset_token is None
    assert outbox == []


def test_forgot_password_requires_email(client):
    assert client.post("/api/users/forgot-password", json={}).status_code == 400


def test_reset_link_issues_one_hour_token(app, client, outbox):
    with app.app_context():
        user_id = create_user("reset@example.com").id

    before = utcnow()
    assert _forgot(client, "RESET@example.com").status_code == 200

    with app.app_context():
        user = db.session.get(User, user_id)
        token = user.password_reset_token
        expires = user.password_reset_expires

    assert token
    assert before + timedelta(minutes=59) < expires <= utcnow() + timedelta(hours=1)
    assert f"https://app.example.com/reset-password?token={token}" in outbox[-1].html


def test_reset_password_consumes_token(app, client):
    with app.app_context():
        user_id = create_user("reset@example.com", "oldpass").id
    _forgot(client, "reset@example.com")
    with app.app_context():
        token = db.session.get(User, user_id).password_reset_token

    response = client.post(
        "/api/users/reset-password", json={"token": token, "password": "newpass"}
    )
    assert response.status_code == 200

    with app.app_context():
        user = db.session.get(User, user_id)
        assert user.check_password("newpass")
        assert user.password_reset_token is None
        assert user.password_reset_expires is None

    again = client.post(
        "/api/users/reset-password", json={"token": token, "password": "another"}
    )
    assert again.status_code == 400
    assert again.get_json()["code"] == "InvalidResetToken"

    login = client.post(
        "/api/users/login", json={"email": "reset@example.com", "password": "newpass"}
    )
    assert login.status_code == 200


def test_expired_token_is_refused(app, client):
    with app.app_context():
        user = create_user("late@example.com", "oldpass")
        user.password_reset_token = "expired-token"
        user.password_reset_expires = utcnow() - timedelta(minutes=1)
        db.session.commit()

    response = client.post(
        "/api/users/reset-password", json={"token": "expired-token", "password": "newpass"}
    )

    assert response.status_code == 400
    assert response.get_json()["code"] == "InvalidResetToken"


def test_weak_and_missing_passwords_are_refused(client):
    weak = client.post("/api/users/reset-password", json={"token": "t", "password": "12345"})
    assert weak.status_code == 400
    assert weak.get_json()["code"] == "WeakPassword"

    missing = client.post("/api/users/reset-password", json={"token": "t"})
    assert missing.status_code == 400


@pytest.mark.parametrize(
    "failure",
    [
        smtplib.SMTPException("smtp down"),
        UnicodeEncodeError("ascii", "p\u00e4ss", 1, 2, "ordinal not in range(128)"),
    ],
    ids=["smtp", "encoding"],
)
def test_failed_reset_email_rolls_back_token(app, client, monkeypatch, failure):
    with app.app_context():
        user_id = create_user("unlucky@example.com").id

    def _fail(email):
        raise failure

    monkeypatch.setattr(app.extensions["mailer"], "send", _fail)

    response = _forgot(client, "unlucky@example.com")

    assert response.status_code == 500
    assert response.get_json()["code"] == "DeliveryError"
    with app.app_context():
        user = db.session.get(User, user_id)
        assert user.password_reset_token is None
        assert user.password_reset_expires is None
