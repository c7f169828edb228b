from flask import Blueprint, request
from flasgger import swag_from

from ...extensions import db
from ...schemas.content import ContentReadSchema
from ...services.access_policy import Action, Resource
from ...utils.audit import audit_log
from ...utils.context import access_policy, link_manager
from ...utils.identity import authenticate, current_subject

link_access_bp = Blueprint("link_access", __name__)

content_read_schema = ContentReadSchema()


@link_access_bp.get("/<string:link>")
@authenticate
@swag_from({
    "tags": ["Links"],
    "summary": "Open a share link",
    "description": (
        "Validates the link, applies the read rule (private content needs the link's "
        "or the content's secret code) and counts one access."
    ),
    "parameters": [{"in": "query", "name": "secret_code", "type": "string", "required": False}],
    "responses": {
        200: {"description": "Content behind the link"},
        403: {"description": "Link expired or exhausted, or secret code rejected"},
        404: {"description": "Unknown link or deleted content"},
    }
})
def open_link(link):
    subject = current_subject()
    manager = link_manager()

    shared, content = manager.resolve(link)
    access_policy().require(
        subject,
        Resource.for_content(content),
        Action.READ,
        secret_code=request.args.get("secret_code"),
        link_token=shared.token,
    )

    manager.redeem(shared)
    audit_log(
        action="LINK_ACCESSED",
        entity_type="LINK",
        entity_id=shared.id,
        details={"content_id": str(content.id), "guest": subject.is_guest},
    )
    db.session.commit()

    return {"content": content_read_schema.dump(content)}, 200
