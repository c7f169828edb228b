from flask import Blueprint
from flasgger import swag_from
from sqlalchemy.exc import IntegrityError

from ...errors import Conflict, Forbidden, NotFound, Unauthorized
from ...extensions import db
from ...models.user import Role, User
from ...schemas.user import UserSchema, UserUpdateSchema, RoleUpdateSchema
from ...utils.audit import audit_log
from ...utils.context import credentials
from ...utils.identity import authenticate, current_subject
from ...utils.rbac import roles_required
from ...utils.validation import validate_or_abort

users_bp = Blueprint("users", __name__)

user_schema = UserSchema()
user_update_schema = UserUpdateSchema()
role_update_schema = RoleUpdateSchema()


def _load_profile(user_id) -> User:
    """Own profile for everyone, any profile for admins."""
    subject = current_subject()
    if subject.is_guest:
        raise Unauthorized("Authentication required")
    if subject.role != Role.ADMIN and subject.id != user_id:
        raise Forbidden()

    user = db.session.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


@users_bp.get("/<uuid:user_id>")
@authenticate
@swag_from({
    "tags": ["Users"],
    "security": [{"BearerAuth": []}],
    "summary": "Get a user profile (self or admin)",
    "responses": {200: {}, 401: {}, 403: {}, 404: {}},
})
def get_user(user_id):
    return {"user": user_schema.dump(_load_profile(user_id))}, 200


@users_bp.put("/<uuid:user_id>")
@authenticate
@swag_from({
    "tags": ["Users"],
    "security": [{"BearerAuth": []}],
    "summary": "Update a user profile (self or admin)",
    "responses": {200: {}, 400: {}, 401: {}, 403: {}, 404: {}, 409: {}},
})
def update_user(user_id):
    user = _load_profile(user_id)
    payload = validate_or_abort(user_update_schema)

    if "username" in payload:
        user.username = payload["username"].strip()
    if "email" in payload:
        user.email = payload["email"].lower().strip()
    if "password" in payload:
        user.password_hash = credentials().hash_password(payload["password"])

    try:
        audit_log(
            action="USER_UPDATED",
            entity_type="USER",
            entity_id=user.id,
            details={"updated_fields": sorted(payload.keys())},
        )
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("Username or email already registered")

    return {"message": "User profile updated successfully", "user": user_schema.dump(user)}, 200


@users_bp.put("/<uuid:user_id>/role")
@authenticate
@roles_required(Role.ADMIN)
@swag_from({
    "tags": ["Users"],
    "security": [{"BearerAuth": []}],
    "summary": "Change a user's role (admin only)",
    "responses": {200: {}, 400: {}, 403: {}, 404: {}},
})
def update_role(user_id):
    payload = validate_or_abort(role_update_schema)

    user = db.session.get(User, user_id)
    if not user:
        raise NotFound("User not found")

    previous = user.role
    user.role = payload["role"]

    audit_log(
        action="USER_ROLE_CHANGED",
        entity_type="USER",
        entity_id=user.id,
        details={"from_role": previous, "to_role": user.role},
    )
    db.session.commit()

    return {"user": user_schema.dump(user)}, 200
