import uuid
from datetime import datetime
from enum import Enum
from sqlalchemy import Uuid
from ..extensions import db


class LinkState(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"


class Link(db.Model):
    __tablename__ = "links"

    id = db.Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Links outlive their content; an orphaned link resolves to "not found"
    content_id = db.Column(Uuid(as_uuid=True), db.ForeignKey("content.id", ondelete="SET NULL"), nullable=True, index=True)

    token = db.Column(db.String(64), nullable=False, unique=True, index=True)
    expiration_date = db.Column(db.DateTime, nullable=True)
    max_access = db.Column(db.Integer, nullable=True)
    access_count = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def state(self, now: datetime | None = None) -> LinkState:
        """Derive the link state from expiry and usage; nothing is stored."""
        now = now or datetime.utcnow()
        if self.expiration_date is not None and self.expiration_date < now:
            return LinkState.EXPIRED
        if self.max_access is not None and (self.access_count or 0) >= self.max_access:
            return LinkState.EXHAUSTED
        return LinkState.ACTIVE
