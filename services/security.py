"""Session and one-time token primitives."""

from __future__ import annotations

import secrets
from datetime import timedelta

from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt import PyJWTError

from .errors import InvalidOrExpiredToken

OPAQUE_TOKEN_BYTES = 32


def generate_opaque_token() -> str:
    """Random one-time token for verification and reset links."""

    return secrets.token_hex(OPAQUE_TOKEN_BYTES)


def issue_session_token(user_id: int, expires_in: timedelta) -> str:
    """Sign a session token bound to ``user_id``."""

    return create_access_token(identity=str(user_id), expires_delta=expires_in)


def read_session_token(token: str | None) -> int:
    """Return the user id carried by a valid session token.

    Raises :class:`InvalidOrExpiredToken` when the signature, expiry or
    subject does not check out.
    """

    if not token:
        raise InvalidOrExpiredToken("Not authorized, no token.")
    try:
        claims = decode_token(token)
    except (PyJWTError, JWTExtendedException) as exc:
        raise InvalidOrExpiredToken() from exc

    try:
        return int(claims["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidOrExpiredToken() from exc
