from flask import Blueprint
from flasgger import swag_from

from ...schemas.analytics import ContentStatsSchema
from ...services.access_policy import Action, Resource
from ...utils.context import access_policy, aggregation
from ...utils.identity import authenticate, current_subject
from ..content.routes import get_content_or_404

analytics_bp = Blueprint("analytics", __name__)

content_stats_schema = ContentStatsSchema()


@analytics_bp.get("/<uuid:content_id>")
@authenticate
@swag_from({
    "tags": ["Analytics"],
    "security": [{"BearerAuth": []}],
    "summary": "Participation statistics for one content (owner or admin)",
    "description": (
        "completion_rate is null when nobody has taken part yet; "
        "average_score is 0 when no answer carries a numeric score."
    ),
    "responses": {200: {}, 403: {}, 404: {}}
})
def content_analytics(content_id):
    subject = current_subject()
    policy = access_policy()
    policy.require_grant(subject, Action.ANALYZE)

    content = get_content_or_404(content_id)
    policy.require(subject, Resource.for_content(content), Action.ANALYZE)

    stats = aggregation().content_stats(content.id)
    return {"analytics": content_stats_schema.dump(stats)}, 200
