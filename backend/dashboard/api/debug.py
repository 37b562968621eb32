"""Debug API endpoints for troubleshooting."""

from flask import Blueprint, current_app, jsonify

from dashboard.api.common import get_jira_client, jira_error, missing_credentials
from services.jira_client import JiraApiError

bp = Blueprint("debug", __name__, url_prefix="/api/debug")


@bp.route("/story-points-field", methods=["GET"])
def find_story_points_field():
    """Find the story points custom fields in this Jira instance.

    Useful when setting STORY_POINTS_FIELDS for a new project.
    """
    client = get_jira_client()

    if client is None:
        return missing_credentials()

    try:
        candidates = client.find_story_points_fields()
    except JiraApiError as e:
        return jira_error(e)

    return jsonify({
        "data": {
            "candidates": candidates,
            "configured": current_app.config["STORY_POINTS_FIELDS"]
        }
    })
