import uuid
from datetime import datetime
from sqlalchemy import Uuid
from ..extensions import db
from .types import JSONType

class ContentElement(db.Model):
    __tablename__ = "content_elements"

    VALID_TYPES = ("Question", "Option", "Prompt", "Feedback")

    id = db.Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    content_id = db.Column(Uuid(as_uuid=True), db.ForeignKey("content.id", ondelete="CASCADE"), nullable=False, index=True)

    element_type = db.Column(db.String(30), nullable=False)
    data = db.Column(JSONType, nullable=False)
    position = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
