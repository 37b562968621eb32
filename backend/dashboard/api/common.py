"""Request helpers shared by the API blueprints."""

from flask import current_app, jsonify, request

from services.jira_client import JiraApiError, JiraClient


def get_settings_store():
    return current_app.extensions["settings_store"]


def get_jira_credentials():
    """Extract Jira credentials from request headers, else from stored settings."""
    server = request.headers.get("X-Jira-Server", "").rstrip("/")
    email = request.headers.get("X-Jira-Email")
    token = request.headers.get("X-Jira-Token")

    if all([server, email, token]):
        return server, email, token

    stored = get_settings_store().load().get("jira") or {}
    server = (stored.get("baseUrl") or "").rstrip("/")
    email = stored.get("email")
    token = stored.get("apiToken")

    if not all([server, email, token]):
        return None, None, None

    return server, email, token


def get_jira_client():
    """Build a JiraClient for this request, or None without credentials."""
    server, email, token = get_jira_credentials()
    if not server:
        return None

    return JiraClient(
        server, email, token,
        story_points_fields=current_app.config["STORY_POINTS_FIELDS"],
        timeout=current_app.config["JIRA_TIMEOUT"]
    )


def missing_credentials():
    return jsonify({"error": "Missing Jira credentials in headers"}), 401


def jira_error(e: JiraApiError):
    """Translate a JiraApiError into a JSON error response."""
    status_code = e.status_code if e.status_code and e.status_code >= 400 else 502
    return jsonify({"error": e.message}), status_code
