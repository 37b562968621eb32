"""Key-value storage for dashboard settings (Jira and AI credentials).

Stores settings in a local JSON file for persistence across browser sessions.
This is intended for local development only - not for hosted deployments.
"""

import copy
import json
import logging
import os

logger = logging.getLogger(__name__)

SETTING_TYPES = ("jira", "ai", "openai")


def default_settings() -> dict:
    return {setting_type: None for setting_type in SETTING_TYPES}


class SettingsStore:
    """Load/save interface the API layer depends on."""

    def load(self) -> dict:
        raise NotImplementedError

    def save(self, settings: dict):
        raise NotImplementedError


class JsonFileSettingsStore(SettingsStore):
    """Settings persisted as a JSON document on disk."""

    def __init__(self, path: str):
        self.path = path

    def _ensure_config_dir(self):
        """Ensure the config directory exists."""
        config_dir = os.path.dirname(self.path)
        if config_dir and not os.path.exists(config_dir):
            os.makedirs(config_dir)

    def load(self) -> dict:
        if not os.path.exists(self.path):
            return default_settings()
        try:
            with open(self.path, "r") as f:
                stored = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Failed to load settings from {self.path}: {e}")
            return default_settings()

        settings = default_settings()
        if isinstance(stored, dict):
            settings.update(stored)
        return settings

    def save(self, settings: dict):
        self._ensure_config_dir()
        with open(self.path, "w") as f:
            json.dump(settings, f, indent=2)


class InMemorySettingsStore(SettingsStore):
    """Settings held in memory, used by tests and ephemeral deployments."""

    def __init__(self, settings: dict = None):
        self._settings = default_settings()
        if settings:
            self._settings.update(copy.deepcopy(settings))

    def load(self) -> dict:
        return copy.deepcopy(self._settings)

    def save(self, settings: dict):
        self._settings = copy.deepcopy(settings)


def update_setting(store: SettingsStore, setting_type: str, credentials) -> dict:
    """Replace one setting, leaving the others as they are.

    Passing None for credentials clears the setting.
    """
    if setting_type not in SETTING_TYPES:
        raise ValueError(f"Invalid setting type: {setting_type}")

    settings = store.load()
    settings[setting_type] = credentials
    store.save(settings)
    return settings


def settings_from_env(environ=None) -> dict:
    """Build settings from environment variables, for container deployments."""
    environ = os.environ if environ is None else environ
    settings = default_settings()

    if environ.get("JIRA_BASE_URL"):
        settings["jira"] = {
            "baseUrl": environ.get("JIRA_BASE_URL"),
            "email": environ.get("JIRA_EMAIL"),
            "apiToken": environ.get("JIRA_API_TOKEN")
        }

    if environ.get("OPENAI_API_KEY"):
        settings["openai"] = {"apiKey": environ.get("OPENAI_API_KEY")}

    if environ.get("AI_API_KEY"):
        settings["ai"] = {
            "provider": environ.get("AI_PROVIDER", "openai"),
            "apiKey": environ.get("AI_API_KEY")
        }
    elif settings["openai"]:
        settings["ai"] = {"provider": "openai", "apiKey": settings["openai"]["apiKey"]}

    return settings
