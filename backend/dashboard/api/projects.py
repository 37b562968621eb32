"""Project, board and sprint listing endpoints."""

from flask import Blueprint, jsonify

from dashboard.api.common import get_jira_client, jira_error, missing_credentials
from services.jira_client import JiraApiError

bp = Blueprint("projects", __name__, url_prefix="/api")


@bp.route("/projects", methods=["GET"])
def list_projects():
    """List Jira projects visible to the user.

    Requires headers (or stored Jira settings):
        - X-Jira-Server: Jira server URL
        - X-Jira-Email: User's Jira email
        - X-Jira-Token: Jira API token
    """
    client = get_jira_client()

    if client is None:
        return missing_credentials()

    try:
        projects = client.get_projects()
    except JiraApiError as e:
        return jira_error(e)

    formatted_projects = [
        {
            "id": project.get("id"),
            "key": project.get("key"),
            "name": project.get("name")
        }
        for project in projects
    ]

    return jsonify({"data": formatted_projects})


@bp.route("/projects/<project_key>/boards", methods=["GET"])
def list_boards(project_key):
    """List boards that belong to a project."""
    client = get_jira_client()

    if client is None:
        return missing_credentials()

    try:
        boards = client.get_boards(project_key)
    except JiraApiError as e:
        return jira_error(e)

    return jsonify({"data": [{"id": board["id"], "name": board["name"]} for board in boards]})


@bp.route("/boards/<int:board_id>/sprints", methods=["GET"])
def list_sprints(board_id):
    """List a board's sprints (active, closed and future)."""
    client = get_jira_client()

    if client is None:
        return missing_credentials()

    try:
        sprints = client.get_sprints(board_id)
    except JiraApiError as e:
        return jira_error(e)

    formatted_sprints = [
        {
            "id": sprint["id"],
            "name": sprint["name"],
            "state": sprint.get("state"),
            "startDate": sprint.get("startDate"),
            "endDate": sprint.get("endDate")
        }
        for sprint in sprints
    ]

    return jsonify({"data": formatted_sprints})
