"""AI insight generation endpoint."""

from flask import Blueprint, current_app, request, jsonify

from dashboard.api.common import get_settings_store
from services.insights import InsightsError, generate_insights, get_provider

bp = Blueprint("insights", __name__, url_prefix="/api")


def resolve_ai_credentials(data: dict):
    """Pick the provider and API key from the request, else stored settings.

    Returns:
        Tuple of (provider_name, api_key); api_key is None when nothing is configured
    """
    if data.get("apiKey"):
        return data.get("provider") or "openai", data["apiKey"]

    settings = get_settings_store().load()
    ai = settings.get("ai") or {}
    if ai.get("apiKey"):
        return data.get("provider") or ai.get("provider") or "openai", ai["apiKey"]

    openai = settings.get("openai") or {}
    if openai.get("apiKey"):
        return "openai", openai["apiKey"]

    return data.get("provider") or "openai", None


@bp.route("/generate-insights", methods=["POST"])
def post_generate_insights():
    """Generate Scrum Master insights for an analytics report.

    Expects JSON body with:
        - data: Analytics report as returned by /api/analytics
        - apiKey: Optional provider API key (falls back to stored settings)
        - provider: Optional "openai" or "anthropic"
    """
    body = request.get_json(silent=True) or {}
    report = body.get("data")

    if not report:
        return jsonify({
            "error": "Analytics data is required",
            "insights": "## ERROR\n\n* **Missing Data**: Analytics data is required to generate insights."
        }), 400

    provider_name, api_key = resolve_ai_credentials(body)

    try:
        provider = get_provider(provider_name, api_key, current_app.config) if api_key else None
    except InsightsError as e:
        return jsonify({
            "error": str(e),
            "insights": f"## ERROR\n\n* **Invalid Provider**: {e}."
        }), 400

    try:
        insights = generate_insights(report, provider)
    except Exception as e:
        current_app.logger.exception("Error generating insights")
        return jsonify({
            "error": "Failed to generate insights",
            "insights": f"## ERROR\n\n* **Generation Failed**: {e}."
        }), 500

    return jsonify({"insights": insights})
