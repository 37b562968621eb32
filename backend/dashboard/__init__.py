"""Flask application factory."""

import click
from flask import Flask
from flask_cors import CORS

from dashboard.config import load_config
from services.settings_store import JsonFileSettingsStore, settings_from_env


def create_app(config=None, settings_store=None):
    """Create and configure the Flask application.

    Args:
        config: Optional overrides applied on top of the environment config
        settings_store: Optional SettingsStore; defaults to the JSON file at
            SETTINGS_FILE
    """
    app = Flask(__name__)
    app.config.update(load_config())
    if config:
        app.config.update(config)

    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Enable CORS for frontend
    CORS(app, resources={
        r"/api/*": {
            "origins": app.config["CORS_ORIGINS"],
            "methods": ["GET", "POST", "DELETE", "OPTIONS"],
            "allow_headers": [
                "Content-Type",
                "X-Jira-Token", "X-Jira-Email", "X-Jira-Server"
            ]
        }
    })

    if settings_store is None:
        settings_store = JsonFileSettingsStore(app.config["SETTINGS_FILE"])
    app.extensions["settings_store"] = settings_store

    # Register blueprints
    from dashboard.api import auth, projects, analytics, insights, settings, debug
    app.register_blueprint(auth.bp)
    app.register_blueprint(projects.bp)
    app.register_blueprint(analytics.bp)
    app.register_blueprint(insights.bp)
    app.register_blueprint(settings.bp)
    app.register_blueprint(debug.bp)

    app.logger.info(
        f"Story points fields in preference order: {', '.join(app.config['STORY_POINTS_FIELDS'])}"
    )

    @app.cli.command("generate-settings")
    def generate_settings():
        """Write the settings store from JIRA_*/OPENAI_*/AI_* environment variables."""
        settings = settings_from_env()
        app.extensions["settings_store"].save(settings)
        configured = [name for name, value in settings.items() if value]
        click.echo(f"Settings generated successfully ({', '.join(configured) or 'nothing configured'}).")

    # Health check endpoint
    @app.route("/health")
    def health():
        return {"status": "ok"}

    return app
