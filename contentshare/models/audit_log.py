import uuid
from datetime import datetime
from sqlalchemy import Uuid
from ..extensions import db
from .types import JSONType

class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Who performed the action (nullable for guests)
    actor_user_id = db.Column(Uuid(as_uuid=True), nullable=True, index=True)
    actor_role = db.Column(db.String(30), nullable=True)

    # What happened
    action = db.Column(db.String(80), nullable=False, index=True)  # e.g. LINK_GENERATED
    entity_type = db.Column(db.String(50), nullable=True, index=True)  # e.g. CONTENT, LINK, AUTH
    entity_id = db.Column(Uuid(as_uuid=True), nullable=True, index=True)

    ip_address = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)

    details = db.Column(JSONType, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
