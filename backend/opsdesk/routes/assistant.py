# Overview: Flask API routes for the chat assistant; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..services import assistant_service
from ..services.tenant_service import TenantAccessError
from ..validation import ValidationError, require_json_object, require_str

assistant_bp = Blueprint("assistant", __name__, url_prefix="/api")


@assistant_bp.post("/chat")
def chat_route():
    """
    Interpret free text and run the resulting commands.

    Body: {workspace_id, text}
    Returns {ok, reply, results, analytics, suggestions}. Per-command problems
    are reported as result lines; only bad input, an unknown workspace or a
    store failure fail the request.
    """
    try:
        data = require_json_object(request.get_json(silent=True))
        workspace_id = require_str(data, "workspace_id", "Missing workspace_id.")
        text = require_str(data, "text", "No message provided.")

        report = assistant_service.handle_message(workspace_id, text)
        return jsonify(report.to_dict()), 200

    except ValidationError as e:
        return jsonify({"ok": False, "error": str(e)}), 400
    except TenantAccessError as e:
        return jsonify({"ok": False, "error": str(e)}), 404
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to process chat message")
        return jsonify({"ok": False, "error": "Database error"}), 500


@assistant_bp.post("/assistant/extract")
def extract_route():
    """Parse text into commands without executing anything."""
    try:
        data = require_json_object(request.get_json(silent=True))
        text = require_str(data, "text", "No message provided.")
    except ValidationError as e:
        return jsonify({"ok": False, "error": str(e)}), 400

    registry = assistant_service.collaborators()
    commands = assistant_service.interpret(text, registry.get("extractor"))
    return jsonify({"ok": True, "commands": [c.to_dict() for c in commands]}), 200
