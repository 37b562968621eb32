"""Authentication API endpoints."""

from flask import Blueprint, current_app, request, jsonify

from services.jira_client import JiraApiError, JiraClient

bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@bp.route("/validate", methods=["POST"])
def validate_token():
    """Validate Jira API token by fetching current user info.

    Expects JSON body with:
        - server: Jira server URL
        - email: User's Jira email
        - token: Jira API token

    Returns user info on success.
    """
    data = request.get_json(silent=True)

    if not data:
        return jsonify({"error": "Missing request body"}), 400

    server = (data.get("server") or "").rstrip("/")
    email = data.get("email")
    token = data.get("token")

    if not all([server, email, token]):
        return jsonify({"error": "Missing required fields: server, email, token"}), 400

    client = JiraClient(server, email, token, timeout=10)

    try:
        user_info = client.get_myself()
    except JiraApiError as e:
        if e.status_code == 401:
            return jsonify({"error": "Invalid credentials"}), 401
        if e.status_code == 504:
            return jsonify({"error": e.message}), 504
        current_app.logger.warning(f"Credential validation against {server} failed: {e.message}")
        return jsonify({"error": e.message}), e.status_code or 502

    return jsonify({
        "data": {
            "valid": True,
            "user": {
                "accountId": user_info.get("accountId"),
                "displayName": user_info.get("displayName"),
                "emailAddress": user_info.get("emailAddress"),
                "avatarUrl": user_info.get("avatarUrls", {}).get("48x48")
            }
        }
    })
