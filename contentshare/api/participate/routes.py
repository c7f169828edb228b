from flask import Blueprint, current_app, request
from flasgger import swag_from

from ...errors import Forbidden, ValidationError
from ...extensions import db
from ...models.content_element import ContentElement
from ...models.response import Response, ResponseDetail
from ...schemas.content import ContentReadSchema
from ...schemas.element import ElementReadSchema
from ...schemas.participation import SubmitResponseSchema
from ...services.access_policy import Action, Resource
from ...services.secret_store import guest_token_key
from ...utils.audit import audit_log
from ...utils.context import access_policy, link_manager, secret_store
from ...utils.identity import authenticate, current_subject
from ...utils.tokens import generate_raw_token
from ...utils.validation import validate_or_abort

participate_bp = Blueprint("participate", __name__)

submit_schema = SubmitResponseSchema()
content_read_schema = ContentReadSchema()
element_read_many_schema = ElementReadSchema(many=True)

GUEST_TOKEN_HEADER = "X-Guest-Token"


def _open(link):
    """Validate the link and apply the participate rule. Returns (link, content)."""
    shared, content = link_manager().resolve(link)
    access_policy().require(
        current_subject(),
        Resource.for_content(content),
        Action.PARTICIPATE,
        secret_code=request.args.get("secret_code"),
        link_token=shared.token,
    )
    return shared, content


@participate_bp.get("/<string:link>")
@authenticate
@swag_from({
    "tags": ["Participation"],
    "summary": "Load content and elements behind a share link",
    "description": "Guests also receive a guest_token to send back as X-Guest-Token when submitting.",
    "parameters": [{"in": "query", "name": "secret_code", "type": "string", "required": False}],
    "responses": {200: {}, 403: {}, 404: {}}
})
def get_participation(link):
    shared, content = _open(link)

    elements = (
        ContentElement.query
        .filter_by(content_id=content.id)
        .order_by(ContentElement.position.asc())
        .all()
    )
    body = {
        "content": content_read_schema.dump(content),
        "elements": element_read_many_schema.dump(elements),
    }

    if current_subject().is_guest:
        guest_token = generate_raw_token()
        ttl = current_app.config["GUEST_TOKEN_TTL_SECONDS"]
        secret_store().set(guest_token_key(shared.token, guest_token), str(content.id), ttl)
        body["guest_token"] = guest_token
        body["guest_token_expires_in"] = ttl

    return body, 200


@participate_bp.post("/<string:link>")
@authenticate
@swag_from({
    "tags": ["Participation"],
    "security": [{"BearerAuth": []}, {"GuestToken": []}],
    "summary": "Submit responses through a share link",
    "parameters": [
        {"in": "query", "name": "secret_code", "type": "string", "required": False},
        {
            "in": "body",
            "name": "body",
            "required": True,
            "schema": {
                "type": "object",
                "properties": {
                    "guestName": {"type": "string", "example": "Ada"},
                    "completed": {"type": "boolean", "example": True},
                    "responses": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "element_id": {"type": "string"},
                                "answer": {"type": "object", "example": {"choice": "B", "score": 1}},
                            },
                        },
                    },
                },
                "required": ["responses"],
            },
        },
    ],
    "responses": {
        201: {"description": "Responses recorded"},
        400: {"description": "Validation error, missing guest name or unknown element ids"},
        403: {"description": "Link expired/exhausted, secret code or guest token rejected"},
        404: {"description": "Unknown link"},
    }
})
def submit_participation(link):
    subject = current_subject()
    shared, content = _open(link)
    payload = validate_or_abort(submit_schema)

    guest_key = None
    guest_name = None
    if subject.is_guest:
        guest_name = (payload.get("guest_name") or "").strip()
        if not guest_name:
            raise ValidationError("Guest name is required", details={"guestName": ["Missing data for required field."]})

        guest_token = request.headers.get(GUEST_TOKEN_HEADER)
        guest_key = guest_token_key(shared.token, guest_token) if guest_token else None
        if not guest_key or secret_store().get(guest_key) is None:
            raise Forbidden("Invalid or missing guest token")

    known = {
        row.id
        for row in db.session.query(ContentElement.id).filter(ContentElement.content_id == content.id).all()
    }
    invalid = [str(item["element_id"]) for item in payload["responses"] if item["element_id"] not in known]
    if invalid:
        raise ValidationError("Responses reference unknown elements", details={"invalid_responses": invalid})

    response = Response(
        content_id=content.id,
        link_id=shared.id,
        user_id=subject.id,
        is_guest=subject.is_guest,
        guest_name=guest_name,
        completed=payload["completed"],
    )
    for item in payload["responses"]:
        response.details.append(ResponseDetail(element_id=item["element_id"], answer=item.get("answer")))
    db.session.add(response)
    db.session.flush()

    link_manager().redeem(shared)
    audit_log(
        action="RESPONSE_SUBMITTED",
        entity_type="RESPONSE",
        entity_id=response.id,
        details={
            "content_id": str(content.id),
            "link_id": str(shared.id),
            "answers": len(payload["responses"]),
            "guest": subject.is_guest,
        },
    )
    db.session.commit()

    if guest_key:
        secret_store().delete(guest_key)

    return {
        "message": "Responses submitted successfully",
        "response_id": str(response.id),
        "content_id": str(content.id),
        "completed": response.completed,
    }, 201
