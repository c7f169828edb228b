from flask import Blueprint, current_app
from flasgger import swag_from
from sqlalchemy.exc import IntegrityError

from ...errors import Conflict, NotFound, Unauthorized
from ...extensions import db
from ...models.user import Role, User
from ...schemas.auth import RegisterSchema, LoginSchema, ForgotPasswordSchema, ResetPasswordSchema
from ...schemas.user import UserSchema
from ...utils.audit import audit_log, safe_audit
from ...utils.context import credentials
from ...utils.identity import authenticate, current_subject
from ...utils.mailer import send_password_reset_email
from ...utils.validation import validate_or_abort

auth_bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
forgot_schema = ForgotPasswordSchema()
reset_schema = ResetPasswordSchema()
user_schema = UserSchema()

FORGOT_PASSWORD_REPLY = "If that email is registered, a password reset link has been sent."


@auth_bp.post("/register")
@swag_from({
    "tags": ["Auth"],
    "summary": "Register a user",
    "description": "Registers a new user with the 'registered' role.",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {
                "username": {"type": "string", "example": "ada"},
                "email": {"type": "string", "example": "ada@example.com"},
                "password": {"type": "string", "example": "StrongPass123"}
            },
            "required": ["username", "email", "password"]
        }
    }],
    "responses": {
        "201": {"description": "User created"},
        "400": {"description": "Validation error"},
        "409": {"description": "Username or email already exists"}
    }
})
def register():
    payload = validate_or_abort(register_schema)

    email = payload["email"].lower().strip()
    username = payload["username"].strip()

    if User.query.filter((User.email == email) | (User.username == username)).first():
        raise Conflict("Username or email already registered")

    user = User(
        username=username,
        email=email,
        role=Role.REGISTERED.value,
        password_hash=credentials().hash_password(payload["password"]),
    )

    try:
        db.session.add(user)
        db.session.flush()  # ensure user.id exists for audit

        audit_log(
            action="USER_REGISTERED",
            entity_type="AUTH",
            entity_id=user.id,
            details={"username": user.username},
            actor_user_id=user.id,
        )

        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration
        db.session.rollback()
        raise Conflict("Username or email already registered")

    return {"message": "User registered successfully", "user": user_schema.dump(user)}, 201


@auth_bp.post("/login")
@swag_from({
    "tags": ["Auth"],
    "summary": "Login with email and password",
    "description": "Returns a bearer access token. Unknown email and wrong password give the same error.",
    "responses": {
        200: {"description": "Login successful, token returned"},
        400: {"description": "Validation error"},
        401: {"description": "Invalid credentials"},
    }
})
def login():
    payload = validate_or_abort(login_schema)

    email = payload["email"].lower().strip()
    user = User.query.filter_by(email=email).first()

    # Invalid credentials (don't leak which part failed)
    if not user or not credentials().verify_password(payload["password"], user.password_hash):
        safe_audit(
            action="LOGIN_FAILED_INVALID_CREDENTIALS",
            entity_type="AUTH",
            details={"email": email},
        )
        raise Unauthorized("Invalid credentials")

    token = credentials().issue_token(user.id, user.role)

    audit_log(
        action="LOGIN_SUCCESS",
        entity_type="AUTH",
        entity_id=user.id,
        details={"role": user.role},
        actor_user_id=user.id,
    )
    db.session.commit()

    return {
        "message": "Login successful",
        "token": token,
        "token_type": "bearer",
        "user": {
            "id": str(user.id),
            "username": user.username,
            "role": user.role,
        },
    }, 200


@auth_bp.get("/me")
@authenticate
@swag_from({
    "tags": ["Auth"],
    "security": [{"BearerAuth": []}],
    "summary": "Get current user profile",
    "responses": {
        200: {"description": "User profile"},
        401: {"description": "Unauthorized"},
        404: {"description": "User not found"},
    },
})
def me():
    subject = current_subject()
    if subject.is_guest:
        raise Unauthorized("Authentication required")

    user = db.session.get(User, subject.id)
    if not user:
        raise NotFound("User not found")

    return {"user": user_schema.dump(user)}, 200


@auth_bp.post("/forgot-password")
@swag_from({
    "tags": ["Auth"],
    "summary": "Request a password reset email",
    "description": "The reply is identical whether or not the email belongs to an account.",
    "responses": {200: {"description": "Request accepted"}, 400: {"description": "Validation error"}},
})
def forgot_password():
    payload = validate_or_abort(forgot_schema)
    email = payload["email"].lower().strip()

    user = User.query.filter_by(email=email).first()
    if not user:
        current_app.logger.info("Password reset requested for unknown email")
        return {"message": FORGOT_PASSWORD_REPLY}, 200

    raw_token, _ = credentials().issue_reset_token(user)
    audit_log(
        action="PASSWORD_RESET_REQUESTED",
        entity_type="AUTH",
        entity_id=user.id,
        actor_user_id=user.id,
    )
    db.session.commit()

    send_password_reset_email(user.email, raw_token)
    return {"message": FORGOT_PASSWORD_REPLY}, 200


@auth_bp.post("/reset-password")
@swag_from({
    "tags": ["Auth"],
    "summary": "Reset a password with an emailed token",
    "responses": {200: {"description": "Password reset"}, 400: {"description": "Token is invalid or has expired"}},
})
def reset_password():
    payload = validate_or_abort(reset_schema)

    service = credentials()
    user = service.consume_reset_token(payload["token"])

    user.password_hash = service.hash_password(payload["new_password"])
    user.clear_reset_token()

    audit_log(
        action="PASSWORD_RESET",
        entity_type="AUTH",
        entity_id=user.id,
        actor_user_id=user.id,
    )
    db.session.commit()

    return {"message": "Password has been reset successfully"}, 200
