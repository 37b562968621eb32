"""Application configuration read from the environment."""

import os

BACKEND_DIR = os.path.dirname(os.path.dirname(__file__))

DEFAULT_SETTINGS_FILE = os.path.join(BACKEND_DIR, "config", "settings.json")


def _split(value: str) -> list:
    return [item.strip() for item in value.split(",") if item.strip()]


def load_config(environ=None) -> dict:
    """Build the Flask config mapping from environment variables.

    STORY_POINTS_FIELDS is an ordered, comma-separated list of Jira field ids;
    the first one holding a value on an issue provides its story points.
    """
    environ = os.environ if environ is None else environ

    return {
        "SETTINGS_FILE": environ.get("SETTINGS_FILE", DEFAULT_SETTINGS_FILE),
        "STORY_POINTS_FIELDS": _split(
            environ.get("STORY_POINTS_FIELDS", "customfield_10016,customfield_10058")
        ),
        "CORS_ORIGINS": _split(
            environ.get("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
        ),
        "JIRA_TIMEOUT": int(environ.get("JIRA_TIMEOUT", 30)),
        "OPENAI_MODEL": environ.get("OPENAI_MODEL", "gpt-4o-mini"),
        "ANTHROPIC_MODEL": environ.get("ANTHROPIC_MODEL", "claude-3-5-haiku-latest"),
        "AI_TIMEOUT": int(environ.get("AI_TIMEOUT", 60)),
        "LOG_LEVEL": environ.get("LOG_LEVEL", "INFO").upper()
    }
