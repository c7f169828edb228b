import uuid
from datetime import datetime
from sqlalchemy import Uuid
from ..extensions import db
from .types import JSONType

class Response(db.Model):
    __tablename__ = "responses"

    id = db.Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    content_id = db.Column(Uuid(as_uuid=True), db.ForeignKey("content.id", ondelete="CASCADE"), nullable=False, index=True)
    link_id = db.Column(Uuid(as_uuid=True), db.ForeignKey("links.id", ondelete="SET NULL"), nullable=True, index=True)

    # Authenticated participant, or a named guest
    user_id = db.Column(Uuid(as_uuid=True), nullable=True, index=True)
    is_guest = db.Column(db.Boolean, nullable=False, default=False)
    guest_name = db.Column(db.String(100), nullable=True)

    completed = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    details = db.relationship(
        "ResponseDetail",
        backref="response",
        lazy=True,
        cascade="all, delete-orphan"
    )


class ResponseDetail(db.Model):
    __tablename__ = "response_details"

    id = db.Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    response_id = db.Column(Uuid(as_uuid=True), db.ForeignKey("responses.id", ondelete="CASCADE"), nullable=False, index=True)
    element_id = db.Column(Uuid(as_uuid=True), db.ForeignKey("content_elements.id", ondelete="CASCADE"), nullable=False, index=True)

    answer = db.Column(JSONType, nullable=True)
