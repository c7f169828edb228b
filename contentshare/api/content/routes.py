from flask import Blueprint, current_app, request
from flasgger import swag_from

from ...errors import NotFound, ValidationError
from ...extensions import db
from ...models.content import Content
from ...schemas.content import ContentCreateSchema, ContentUpdateSchema, ContentReadSchema
from ...services.access_policy import Action, Resource
from ...services.secret_store import content_secret_key
from ...utils.audit import audit_log
from ...utils.context import access_policy, secret_store
from ...utils.identity import authenticate, current_subject
from ...utils.tokens import generate_hex_token
from ...utils.validation import validate_or_abort, query_int

content_bp = Blueprint("content", __name__)

content_create_schema = ContentCreateSchema()
content_update_schema = ContentUpdateSchema()
content_read_schema = ContentReadSchema()
content_read_many_schema = ContentReadSchema(many=True)

SECRET_CODE_BYTES = 4


def get_content_or_404(content_id) -> Content:
    content = db.session.get(Content, content_id)
    if not content:
        raise NotFound("Content not found")
    return content


def _issue_secret_code(content: Content) -> str:
    code = generate_hex_token(SECRET_CODE_BYTES)
    secret_store().set(content_secret_key(content.id), code, current_app.config["SECRET_CODE_TTL_SECONDS"])
    return code


@content_bp.post("/")
@authenticate
@swag_from({
    "tags": ["Content"],
    "security": [{"BearerAuth": []}],
    "summary": "Create content",
    "description": "Guests may only create Quiz content. Private content gets a secret code valid for one hour.",
    "responses": {201: {"description": "Created"}, 400: {"description": "Validation error"}, 403: {"description": "Forbidden"}}
})
def create_content():
    payload = validate_or_abort(content_create_schema)
    subject = current_subject()

    access_policy().require(
        subject,
        Resource(owner_id=subject.id, content_type=payload["type"], is_public=payload["is_public"]),
        Action.CREATE,
    )

    content = Content(
        owner_id=subject.id,
        title=payload["title"].strip(),
        type=payload["type"],
        description=payload.get("description") or None,
        settings=payload.get("settings") or {},
        is_public=payload["is_public"],
    )
    db.session.add(content)
    db.session.flush()

    secret_code = None
    if not content.is_public:
        secret_code = _issue_secret_code(content)

    db.session.commit()

    body = content_read_schema.dump(content)
    if secret_code:
        body["secret_code"] = secret_code
    return {"message": "Content created successfully", "content": body}, 201


@content_bp.get("/")
@authenticate
@swag_from({
    "tags": ["Content"],
    "security": [{"BearerAuth": []}],
    "summary": "List content",
    "description": "Registered users see their own content, admins see everything, guests are refused.",
    "parameters": [
        {"in": "query", "name": "page", "type": "integer", "required": False, "default": 1},
        {"in": "query", "name": "limit", "type": "integer", "required": False, "default": 10},
    ],
    "responses": {200: {"description": "OK"}, 403: {"description": "Guests cannot list content"}}
})
def list_content():
    owner_id = access_policy().owner_scope(current_subject())
    page = query_int("page", 1)
    limit = query_int("limit", 10, maximum=100)

    q = Content.query
    if owner_id is not None:
        q = q.filter(Content.owner_id == owner_id)

    items = (
        q.order_by(Content.created_at.desc())
        .limit(limit)
        .offset((page - 1) * limit)
        .all()
    )
    return {"content": content_read_many_schema.dump(items), "page": page, "limit": limit}, 200


@content_bp.get("/<uuid:content_id>")
@authenticate
@swag_from({
    "tags": ["Content"],
    "security": [{"BearerAuth": []}],
    "summary": "Get content",
    "description": "Private content needs the owner, an admin, or the current secret code.",
    "parameters": [{"in": "query", "name": "secret_code", "type": "string", "required": False}],
    "responses": {200: {}, 403: {"description": "Invalid or missing secret code"}, 404: {}}
})
def get_content(content_id):
    content = get_content_or_404(content_id)
    access_policy().require(
        current_subject(),
        Resource.for_content(content),
        Action.READ,
        secret_code=request.args.get("secret_code"),
    )
    return {"content": content_read_schema.dump(content)}, 200


@content_bp.put("/<uuid:content_id>")
@authenticate
@swag_from({
    "tags": ["Content"],
    "security": [{"BearerAuth": []}],
    "summary": "Update content (owner or admin)",
    "responses": {200: {}, 400: {}, 403: {}, 404: {}}
})
def update_content(content_id):
    subject = current_subject()
    policy = access_policy()
    policy.require_grant(subject, Action.UPDATE)

    content = get_content_or_404(content_id)
    policy.require(subject, Resource.for_content(content), Action.UPDATE)

    payload = validate_or_abort(content_update_schema)
    was_public = content.is_public

    if "title" in payload:
        content.title = payload["title"].strip()
    if "type" in payload:
        content.type = payload["type"]
    if "description" in payload:
        content.description = payload.get("description") or None
    if "settings" in payload:
        content.settings = payload["settings"] or {}
    if "is_public" in payload:
        content.is_public = payload["is_public"]

    secret_code = None
    if was_public and not content.is_public:
        secret_code = _issue_secret_code(content)
    elif not was_public and content.is_public:
        secret_store().delete(content_secret_key(content.id))

    db.session.commit()

    body = content_read_schema.dump(content)
    if secret_code:
        body["secret_code"] = secret_code
    return {"message": "Content updated successfully", "content": body}, 200


@content_bp.delete("/<uuid:content_id>")
@authenticate
@swag_from({
    "tags": ["Content"],
    "security": [{"BearerAuth": []}],
    "summary": "Delete content (owner or admin)",
    "responses": {200: {}, 403: {}, 404: {}}
})
def delete_content(content_id):
    subject = current_subject()
    policy = access_policy()
    policy.require_grant(subject, Action.DELETE)

    content = get_content_or_404(content_id)
    policy.require(subject, Resource.for_content(content), Action.DELETE)

    audit_log(
        action="CONTENT_DELETED",
        entity_type="CONTENT",
        entity_id=content.id,
        details={"title": content.title, "type": content.type},
    )
    body = content_read_schema.dump(content)
    db.session.delete(content)
    db.session.commit()

    secret_store().delete(content_secret_key(content_id))
    return {"message": "Content deleted successfully", "content": body}, 200


@content_bp.post("/<uuid:content_id>/secret-code")
@authenticate
@swag_from({
    "tags": ["Content"],
    "security": [{"BearerAuth": []}],
    "summary": "Issue a fresh secret code for private content (owner or admin)",
    "responses": {201: {}, 400: {"description": "Content is public"}, 403: {}, 404: {}}
})
def reissue_secret_code(content_id):
    subject = current_subject()
    policy = access_policy()
    policy.require_grant(subject, Action.UPDATE)

    content = get_content_or_404(content_id)
    policy.require(subject, Resource.for_content(content), Action.UPDATE)

    if content.is_public:
        raise ValidationError("Public content has no secret code")

    return {
        "content_id": str(content.id),
        "secret_code": _issue_secret_code(content),
        "expires_in": current_app.config["SECRET_CODE_TTL_SECONDS"],
    }, 201
