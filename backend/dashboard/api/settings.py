"""Settings storage API endpoints.

Tokens are returned as-is since the store is meant for local use only.
"""

from flask import Blueprint, current_app, request, jsonify

from dashboard.api.common import get_settings_store
from services.settings_store import SETTING_TYPES, update_setting

bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@bp.route("", methods=["GET"])
def get_settings():
    """Get stored Jira and AI settings."""
    try:
        settings = get_settings_store().load()
    except Exception as e:
        current_app.logger.error(f"Error loading settings: {e}")
        return jsonify({"error": "Failed to load settings"}), 500

    return jsonify({"data": settings})


@bp.route("", methods=["POST"])
def save_settings():
    """Save one setting.

    Expects JSON body with:
        - type: one of "jira", "ai", "openai"
        - credentials: the value to store for that type

    Other settings are left untouched.
    """
    data = request.get_json(silent=True) or {}
    setting_type = data.get("type")
    credentials = data.get("credentials")

    if not setting_type or not credentials:
        return jsonify({"error": "Type and credentials are required"}), 400

    if setting_type not in SETTING_TYPES:
        return jsonify({"error": "Invalid setting type"}), 400

    try:
        update_setting(get_settings_store(), setting_type, credentials)
    except (IOError, OSError) as e:
        current_app.logger.error(f"Error saving settings: {e}")
        return jsonify({"error": "Failed to save settings"}), 500

    current_app.logger.info(f"Saved {setting_type} settings")
    return jsonify({"data": {"success": True}})


@bp.route("/<setting_type>", methods=["DELETE"])
def clear_setting(setting_type):
    """Clear one stored setting."""
    if setting_type not in SETTING_TYPES:
        return jsonify({"error": "Invalid setting type"}), 400

    try:
        update_setting(get_settings_store(), setting_type, None)
    except (IOError, OSError) as e:
        current_app.logger.error(f"Error clearing settings: {e}")
        return jsonify({"error": "Failed to save settings"}), 500

    return jsonify({"data": {"cleared": True}})
