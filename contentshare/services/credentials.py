from datetime import datetime, timedelta
from typing import Dict, Any, Tuple

from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from ..errors import InvalidResetToken, Unauthorized
from ..models.user import Role, User
from ..utils.security import hash_password, verify_password
from ..utils.tokens import generate_hex_token, token_digest


class CredentialService:
    """
    Password hashing, access tokens and the password-reset token lifecycle.

    Every token failure is reported with the same error so callers cannot
    tell a bad signature from an expired or unknown token.
    """

    RESET_TOKEN_BYTES = 32

    def __init__(self, password_hash_method: str, reset_token_ttl_seconds: int = 3600):
        self.password_hash_method = password_hash_method
        self.reset_token_ttl = timedelta(seconds=reset_token_ttl_seconds)

    def hash_password(self, raw_password: str) -> str:
        return hash_password(raw_password, method=self.password_hash_method)

    def verify_password(self, raw_password: str, password_hash: str) -> bool:
        return verify_password(raw_password, password_hash)

    def issue_token(self, user_id, role: Role) -> str:
        return create_access_token(identity=str(user_id), additional_claims={"role": Role(role).value})

    def verify_token(self, token: str) -> Dict[str, Any]:
        try:
            claims = decode_token(token)
        except (PyJWTError, JWTExtendedException) as e:
            raise Unauthorized() from e
        return self.identity_from_claims(claims)

    def identity_from_claims(self, claims: Dict[str, Any]) -> Dict[str, Any]:
        """Check the decoded claims of an access token; returns ``{"id", "role"}``."""
        if claims.get("type") != "access" or not claims.get("sub"):
            raise Unauthorized()
        try:
            role = Role(claims.get("role"))
        except ValueError:
            raise Unauthorized()
        return {"id": claims["sub"], "role": role}

    def issue_reset_token(self, user: User, now: datetime | None = None) -> Tuple[str, datetime]:
        """Attach a fresh reset token to ``user``; returns the raw token for the email."""
        raw = generate_hex_token(self.RESET_TOKEN_BYTES)
        expires_at = (now or datetime.utcnow()) + self.reset_token_ttl
        user.set_reset_token(token_digest(raw), expires_at)
        return raw, expires_at

    def consume_reset_token(self, raw_token: str, now: datetime | None = None) -> User:
        """
        Resolve the user owning ``raw_token``. The caller sets the new
        password and must call ``user.clear_reset_token()`` before committing.
        """
        if not raw_token:
            raise InvalidResetToken()
        user = User.query.filter_by(reset_token_hash=token_digest(raw_token)).first()
        if not user or user.reset_token_expired(now):
            raise InvalidResetToken()
        return user
