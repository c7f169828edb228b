import uuid
from datetime import datetime
from sqlalchemy import Uuid
from ..extensions import db
from .types import JSONType

class Content(db.Model):
    __tablename__ = "content"

    TYPE_QUIZ = "Quiz"
    VALID_TYPES = ("Quiz", "Survey", "DragDrop", "WordCloud", "FeedbackWall", "Flashcards", "MindMap")

    id = db.Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Null for content created by guests
    owner_id = db.Column(Uuid(as_uuid=True), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    title = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(30), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    settings = db.Column(JSONType, nullable=False, default=dict)
    is_public = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    elements = db.relationship(
        "ContentElement",
        backref="content",
        lazy=True,
        order_by="ContentElement.position",
        cascade="all, delete-orphan"
    )
    responses = db.relationship(
        "Response",
        backref="content",
        lazy=True,
        cascade="all, delete-orphan"
    )
