"""Session guards shared by the blueprints."""

from __future__ import annotations

from functools import wraps

from flask import g, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException, NoAuthorizationError
from jwt import PyJWTError

from models.user import User
from services import get_auth_service
from services.errors import AuthenticationError, AuthorizationError, InvalidOrExpiredToken
from utils.request_validation import parse_id


def load_current_user() -> User | None:
    """Authenticate the request and remember the user on ``g``.

    CORS preflight requests carry no credentials and pass through with
    ``None``.
    """

    if request.method == "OPTIONS":
        return None

    try:
        verify_jwt_in_request()
    except NoAuthorizationError as exc:
        raise AuthenticationError("Not authorized, no token.") from exc
    except (PyJWTError, JWTExtendedException) as exc:
        raise InvalidOrExpiredToken() from exc

    user_id = parse_id(get_jwt_identity())
    if user_id is None:
        raise InvalidOrExpiredToken()
    g.current_user = get_auth_service().load_user(user_id)
    return g.current_user


def require_admin() -> User | None:
    user = load_current_user()
    if user is not None and not user.is_admin:
        raise AuthorizationError()
    return user


def session_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        load_current_user()
        return view(*args, **kwargs)

    return wrapper
