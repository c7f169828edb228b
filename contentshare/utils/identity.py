import uuid
from functools import wraps
from flask import g, request
from flask_jwt_extended import get_jwt, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from ..errors import Unauthorized
from ..services.access_policy import Subject
from .context import credentials


def resolve_subject() -> Subject:
    """
    No Authorization header means the fixed guest identity. A header that is
    present but unusable is an error, never a silent downgrade to guest.
    """
    try:
        token_data = verify_jwt_in_request(optional=True)
    except (PyJWTError, JWTExtendedException) as e:
        raise Unauthorized() from e

    if token_data is None:
        # optional=True also treats a header without the Bearer type as absent
        if request.headers.get("Authorization", "").strip():
            raise Unauthorized("Malformed authorization header")
        return Subject.guest()

    claims = credentials().identity_from_claims(get_jwt())
    try:
        user_id = uuid.UUID(claims["id"])
    except ValueError:
        raise Unauthorized()
    return Subject(id=user_id, role=claims["role"])


def authenticate(fn):
    """Resolve the caller (user or guest) into ``g.subject`` before the view runs."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        g.subject = resolve_subject()
        return fn(*args, **kwargs)
    return wrapper


def current_subject() -> Subject:
    return getattr(g, "subject", None) or Subject.guest()
