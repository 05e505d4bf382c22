"""Persistent application settings helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List

import jsonschema

from scriptrunner.logging import get_logger

from .errors import SettingsError
from .language import SCRIPT_PLACEHOLDER, LanguageDescriptor

logger = get_logger(__name__)

SETTINGS_DIR = Path.home() / ".config" / "scriptrunner"
SETTINGS_PATH = SETTINGS_DIR / "settings.json"

# User-defined toolchains, e.g.
#   {"id": "python", "display_name": "Python", "extension": "py",
#    "command": ["python3", "-u", "{script}"]}
LANGUAGES_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "array",
    "items": {
        "type": "object",
        "required": ["id", "extension", "command"],
        "additionalProperties": False,
        "properties": {
            "id": {"type": "string", "pattern": "^[A-Za-z0-9_-]+$"},
            "display_name": {"type": "string", "minLength": 1},
            "extension": {"type": "string", "pattern": "^[A-Za-z0-9_]+$"},
            "command": {
                "type": "array",
                "minItems": 1,
                "items": {"type": "string", "minLength": 1},
                "contains": {"const": SCRIPT_PLACEHOLDER},
            },
        },
    },
}


def load_settings() -> dict:
    """Load settings from disk.

    Returns an empty dict if settings file does not exist or contains invalid JSON.
    """
    if not SETTINGS_PATH.exists():
        return {}

    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring unreadable settings file {SETTINGS_PATH}: {e}")
        return {}

    return data if isinstance(data, dict) else {}


def save_settings(data: dict) -> None:
    """Persist settings to disk atomically."""
    SETTINGS_DIR.mkdir(parents=True, exist_ok=True)
    tmp_path = SETTINGS_PATH.with_suffix(".tmp")
    tmp_path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
    tmp_path.replace(SETTINGS_PATH)


def get_setting(key: str, default: Any = None) -> Any:
    """Read a setting value with a fallback default."""
    settings = load_settings()
    return settings.get(key, default)


def set_setting(key: str, value: Any) -> None:
    """Set and persist a single setting key."""
    settings = load_settings()
    settings[key] = value
    save_settings(settings)


def load_user_languages() -> List[LanguageDescriptor]:
    """Read user-defined languages from the ``languages`` setting.

    Raises:
        SettingsError: if the setting does not match LANGUAGES_SCHEMA.
    """
    raw = get_setting("languages", [])
    try:
        jsonschema.validate(instance=raw, schema=LANGUAGES_SCHEMA)
    except jsonschema.exceptions.ValidationError as e:
        raise SettingsError(f"Invalid 'languages' setting: {e.message}") from e

    languages = []
    for entry in raw:
        try:
            languages.append(LanguageDescriptor.from_dict(entry))
        except ValueError as e:
            raise SettingsError(f"Invalid 'languages' setting: {e}") from e
    return languages
