from flask import Blueprint, request
from flasgger import swag_from
from sqlalchemy import func

from ...errors import NotFound
from ...extensions import db
from ...models.content import Content
from ...models.content_element import ContentElement
from ...schemas.element import ElementsCreateSchema, ElementUpdateSchema, ElementReadSchema
from ...services.access_policy import Action, Resource
from ...utils.context import access_policy
from ...utils.identity import authenticate, current_subject
from ...utils.validation import validate_or_abort
from ..content.routes import get_content_or_404

elements_bp = Blueprint("elements", __name__)

elements_create_schema = ElementsCreateSchema()
element_update_schema = ElementUpdateSchema()
element_read_schema = ElementReadSchema()
element_read_many_schema = ElementReadSchema(many=True)


def _element_with_content(element_id):
    row = (
        db.session.query(ContentElement, Content)
        .join(Content, ContentElement.content_id == Content.id)
        .filter(ContentElement.id == element_id)
        .first()
    )
    if row is None:
        raise NotFound("Element not found")
    return row


@elements_bp.post("/<uuid:content_id>/elements")
@authenticate
@swag_from({
    "tags": ["Content Elements"],
    "security": [{"BearerAuth": []}],
    "summary": "Add elements to content (owner or admin)",
    "description": "Elements without a position are appended after the current last position.",
    "responses": {201: {}, 400: {}, 403: {}, 404: {}}
})
def add_elements(content_id):
    subject = current_subject()
    policy = access_policy()
    policy.require_grant(subject, Action.UPDATE)

    content = get_content_or_404(content_id)
    policy.require(subject, Resource.for_content(content), Action.UPDATE)

    payload = validate_or_abort(elements_create_schema)

    last = (
        db.session.query(func.max(ContentElement.position))
        .filter(ContentElement.content_id == content.id)
        .scalar()
        or 0
    )
    # Sequential positions skip the ones the caller asked for explicitly
    taken = {e["position"] for e in payload["elements"] if e.get("position") is not None}

    created = []
    next_position = last
    for item in payload["elements"]:
        position = item.get("position")
        if position is None:
            next_position += 1
            while next_position in taken:
                next_position += 1
            position = next_position
        element = ContentElement(
            content_id=content.id,
            element_type=item["element_type"],
            data=item["data"],
            position=position,
        )
        db.session.add(element)
        created.append(element)

    db.session.commit()

    return {
        "message": "Elements added successfully",
        "elements": element_read_many_schema.dump(created),
    }, 201


@elements_bp.get("/<uuid:content_id>/elements")
@authenticate
@swag_from({
    "tags": ["Content Elements"],
    "security": [{"BearerAuth": []}],
    "summary": "List elements of content, ordered by position",
    "parameters": [{"in": "query", "name": "secret_code", "type": "string", "required": False}],
    "responses": {200: {}, 403: {}, 404: {}}
})
def get_elements(content_id):
    content = get_content_or_404(content_id)
    access_policy().require(
        current_subject(),
        Resource.for_content(content),
        Action.READ,
        secret_code=request.args.get("secret_code"),
    )

    elements = (
        ContentElement.query
        .filter_by(content_id=content.id)
        .order_by(ContentElement.position.asc())
        .all()
    )
    return {"elements": element_read_many_schema.dump(elements)}, 200


@elements_bp.put("/elements/<uuid:element_id>")
@authenticate
@swag_from({
    "tags": ["Content Elements"],
    "security": [{"BearerAuth": []}],
    "summary": "Update an element (owner or admin)",
    "responses": {200: {}, 400: {}, 403: {}, 404: {}}
})
def update_element(element_id):
    subject = current_subject()
    policy = access_policy()
    policy.require_grant(subject, Action.UPDATE)

    element, content = _element_with_content(element_id)
    policy.require(subject, Resource.for_content(content), Action.UPDATE)

    payload = validate_or_abort(element_update_schema)
    if "data" in payload:
        element.data = payload["data"]
    if "position" in payload:
        element.position = payload["position"]

    db.session.commit()
    return {"element": element_read_schema.dump(element)}, 200


@elements_bp.delete("/elements/<uuid:element_id>")
@authenticate
@swag_from({
    "tags": ["Content Elements"],
    "security": [{"BearerAuth": []}],
    "summary": "Delete an element (owner or admin)",
    "responses": {200: {}, 403: {}, 404: {}}
})
def delete_element(element_id):
    subject = current_subject()
    policy = access_policy()
    policy.require_grant(subject, Action.DELETE)

    element, content = _element_with_content(element_id)
    policy.require(subject, Resource.for_content(content), Action.DELETE)

    body = element_read_schema.dump(element)
    db.session.delete(element)
    db.session.commit()

    return {"message": "Element deleted successfully", "element": body}, 200
