from datetime import datetime
from flask import Blueprint, current_app
from flasgger import swag_from

from ...extensions import db
from ...schemas.link import LinkCreateSchema, LinkUpdateSchema, LinkReadSchema
from ...services.access_policy import Action
from ...utils.audit import audit_log
from ...utils.context import access_policy, link_manager
from ...utils.identity import authenticate, current_subject
from ...utils.validation import validate_or_abort
from ..content.routes import get_content_or_404

links_bp = Blueprint("links", __name__)

link_create_schema = LinkCreateSchema()
link_update_schema = LinkUpdateSchema()
link_read_schema = LinkReadSchema()


def share_url(token: str) -> str:
    return f"{current_app.config['BASE_URL'].rstrip('/')}/content/{token}"


def _link_body(link, now=None):
    body = link_read_schema.dump(link)
    body["state"] = link.state(now).value
    return body


def _listed_link_body(link, content, now):
    body = _link_body(link, now)
    body["title"] = content.title if content is not None else None
    body["type"] = content.type if content is not None else None
    # Content deleted; the link stays until someone deletes it
    body["orphaned"] = content is None
    return body


@links_bp.post("/<uuid:content_id>/generate-link")
@authenticate
@swag_from({
    "tags": ["Links"],
    "security": [{"BearerAuth": []}],
    "summary": "Generate a share link for content (owner or admin)",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": False,
        "schema": {
            "type": "object",
            "properties": {
                "expirationDate": {"type": "string", "format": "date-time"},
                "maxAccess": {"type": "integer", "minimum": 1},
                "secretCode": {"type": "string"},
            },
        },
    }],
    "responses": {201: {}, 400: {}, 403: {}, 404: {}}
})
def generate_link(content_id):
    subject = current_subject()
    access_policy().require_grant(subject, Action.SHARE)

    content = get_content_or_404(content_id)
    payload = validate_or_abort(link_create_schema)

    link = link_manager().generate(
        subject,
        content,
        expiration_date=payload.get("expiration_date"),
        max_access=payload.get("max_access"),
        secret_code=payload.get("secret_code"),
    )

    audit_log(
        action="LINK_GENERATED",
        entity_type="LINK",
        entity_id=link.id,
        details={
            "content_id": str(content.id),
            "max_access": link.max_access,
            "expires": link.expiration_date.isoformat() if link.expiration_date else None,
            "secret_code": bool(payload.get("secret_code")),
        },
    )
    db.session.commit()

    return {
        "message": "Link generated successfully",
        "link": share_url(link.token),
        "details": _link_body(link),
    }, 201


@links_bp.get("/all-links")
@authenticate
@swag_from({
    "tags": ["Links"],
    "security": [{"BearerAuth": []}],
    "summary": "List share links (own content, or all for admins)",
    "description": "Admins also see links whose content was deleted (orphaned: true).",
    "responses": {200: {}, 403: {}}
})
def all_links():
    now = datetime.utcnow()
    rows = link_manager().list_links(current_subject())
    return {"links": [_listed_link_body(link, content, now) for link, content in rows]}, 200


@links_bp.put("/update-link/<string:link>")
@authenticate
@swag_from({
    "tags": ["Links"],
    "security": [{"BearerAuth": []}],
    "summary": "Update expiry / access cap of a link (owner or admin)",
    "description": "Absent fields are left alone; null clears the limit.",
    "responses": {200: {}, 400: {}, 403: {}, 404: {}}
})
def update_link(link):
    subject = current_subject()
    access_policy().require_grant(subject, Action.UPDATE)
    payload = validate_or_abort(link_update_schema)

    updated = link_manager().update_settings(subject, link, **payload)
    db.session.commit()

    return {"link": _link_body(updated)}, 200


@links_bp.delete("/delete-link/<string:link>")
@authenticate
@swag_from({
    "tags": ["Links"],
    "security": [{"BearerAuth": []}],
    "summary": "Delete a link (owner or admin)",
    "responses": {200: {}, 403: {}, 404: {}}
})
def delete_link(link):
    manager = link_manager()
    deleted = manager.delete(current_subject(), link)

    audit_log(
        action="LINK_DELETED",
        entity_type="LINK",
        entity_id=deleted.id,
        details={"content_id": str(deleted.content_id) if deleted.content_id else None},
    )
    db.session.commit()

    manager.forget_secret_code(link)
    return {"message": "Link deleted successfully"}, 200
