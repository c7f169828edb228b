from flask import Blueprint
from flasgger import swag_from

from ...schemas.analytics import DashboardOverviewSchema
from ...utils.context import access_policy, aggregation
from ...utils.identity import authenticate, current_subject

dashboard_bp = Blueprint("dashboard", __name__)

overview_schema = DashboardOverviewSchema()


@dashboard_bp.get("/")
@authenticate
@swag_from({
    "tags": ["Dashboard"],
    "security": [{"BearerAuth": []}],
    "summary": "Dashboard overview",
    "description": "Registered users see totals over their own content, admins over all content. Guests are refused.",
    "responses": {200: {}, 403: {"description": "Guests have no dashboard"}}
})
def dashboard_overview():
    owner_id = access_policy().owner_scope(current_subject())
    overview = aggregation().dashboard_overview(owner_id)
    return {"dashboard_overview": overview_schema.dump(overview)}, 200
