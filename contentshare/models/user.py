import uuid
from datetime import datetime
from enum import Enum
from sqlalchemy import Uuid
from ..extensions import db


class Role(str, Enum):
    GUEST = "guest"
    REGISTERED = "registered"
    ADMIN = "admin"


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = db.Column(db.String(100), nullable=False, unique=True, index=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(30), nullable=False, default=Role.REGISTERED.value)

    # Password reset: only an HMAC digest of the emailed token is stored
    reset_token_hash = db.Column(db.String(64), nullable=True, unique=True, index=True)
    reset_token_expires_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def set_reset_token(self, token_hash: str, expires_at: datetime) -> None:
        self.reset_token_hash = token_hash
        self.reset_token_expires_at = expires_at

    def clear_reset_token(self) -> None:
        self.reset_token_hash = None
        self.reset_token_expires_at = None

    def reset_token_expired(self, now: datetime | None = None) -> bool:
        if self.reset_token_expires_at is None:
            return True
        return (now or datetime.utcnow()) >= self.reset_token_expires_at
