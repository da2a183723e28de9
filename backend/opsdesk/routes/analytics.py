# Overview: Flask API route for period analytics; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from ..config import AssistantSettings
from ..extensions import db
from ..services.commands import ANALYTICS_PERIODS
from ..services.reporting_service import ReportError, compute_analytics
from ..services.tenant_service import TenantAccessError, require_workspace
from ..validation import ValidationError, optional_choice, require_json_object, require_str

analytics_bp = Blueprint("analytics", __name__, url_prefix="/api/analytics")


@analytics_bp.post("")
def analytics_route():
    """
    Revenue, expense and profit rollup for one workspace.

    Body: {workspace_id, period?}; period is today (default), week, month or all.
    """
    try:
        data = require_json_object(request.get_json(silent=True))
        workspace_id = require_str(data, "workspace_id", "Missing workspace_id.")
        period = optional_choice(data, "period", ANALYTICS_PERIODS, "today")

        workspace = require_workspace(workspace_id)
        settings = AssistantSettings.from_config(current_app.config)
        snapshot = compute_analytics(
            workspace_id=workspace.id,
            period=period,
            tz_name=workspace.timezone,
            top_n=settings.top_n,
        )
        return jsonify({"ok": True, "data": snapshot.to_dict()}), 200

    except (ValidationError, ReportError) as e:
        return jsonify({"ok": False, "error": str(e)}), 400
    except TenantAccessError as e:
        return jsonify({"ok": False, "error": str(e)}), 404
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to compute analytics")
        return jsonify({"ok": False, "error": "Database error"}), 500
