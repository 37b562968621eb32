"""Team performance analytics endpoints."""

from flask import Blueprint, current_app, request, jsonify

from dashboard.api.common import get_jira_client, jira_error, missing_credentials
from services.analytics import analyze_team_performance
from services.jira_client import JiraApiError

bp = Blueprint("analytics", __name__, url_prefix="/api/analytics")


def get_date_range():
    """Get optional created-date range from query params.

    Query params:
        - start_date: ISO date string (e.g., "2024-01-01")
        - end_date: ISO date string (e.g., "2024-03-31")

    Returns:
        Tuple of (start_date, end_date), either can be None
    """
    start_date = request.args.get("start_date") or None
    end_date = request.args.get("end_date") or None
    return start_date, end_date


@bp.route("/projects/<project_key>", methods=["GET"])
def get_project_analytics(project_key):
    """Analyze every issue in a project.

    Query params:
        - start_date: Optional ISO date, issues created on or after
        - end_date: Optional ISO date, issues created on or before

    Returns:
        - Totals and completed story points
        - Per-user performance
        - Issue distribution by type and status
        - Daily completion trend
    """
    client = get_jira_client()

    if client is None:
        return missing_credentials()

    start_date, end_date = get_date_range()

    try:
        issues = client.fetch_all_issues(project_key, start_date, end_date)
        report = analyze_team_performance(issues, current_app.config["STORY_POINTS_FIELDS"])
        return jsonify({"data": report.to_dict()})
    except JiraApiError as e:
        return jira_error(e)
    except Exception as e:
        current_app.logger.exception(f"Failed to analyze project {project_key}")
        return jsonify({"error": str(e)}), 500


@bp.route("/sprints/<int:sprint_id>", methods=["GET"])
def get_sprint_analytics(sprint_id):
    """Analyze the issues in a single sprint."""
    client = get_jira_client()

    if client is None:
        return missing_credentials()

    try:
        issues = client.get_sprint_issues(sprint_id)
        report = analyze_team_performance(issues, current_app.config["STORY_POINTS_FIELDS"])
        return jsonify({"data": report.to_dict()})
    except JiraApiError as e:
        return jira_error(e)
    except Exception as e:
        current_app.logger.exception(f"Failed to analyze sprint {sprint_id}")
        return jsonify({"error": str(e)}), 500
