# Overview: Flask API route for the owner dashboard.

from flask import Blueprint

from ..decorators import current_account_id, require_auth, require_role
from ..models import ROLE_OWNER
from ..responses import internal_error, ok
from ..services import dashboard_service


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("/stats")
@require_auth
@require_role(ROLE_OWNER)
def dashboard_stats_route():
    try:
        stats = dashboard_service.get_dashboard_stats(current_account_id())
        return ok(stats=stats)
    except Exception:
        return internal_error("Failed to compute dashboard stats")
