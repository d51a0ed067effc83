"""
Typed settings record shared with the UI.

The settings document is a flat JSON object with camelCase keys. The engine
only interprets the fields declared on Settings. Every other key is kept in
``extra`` so a wholesale rewrite does not drop UI state.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from projectshell._types import ProjectType
from projectshell.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_COMMAND_TIMEOUT = 600.0
DEFAULT_PROBE_TIMEOUT = 15.0
DEFAULT_MAX_OUTPUT_CHARS = 200_000

# Settings field -> JSON key
_JSON_KEYS: dict[str, str] = {
    "python_projects_path": "pythonProjectsPath",
    "nodejs_projects_path": "nodejsProjectsPath",
    "webapps_path": "webAppsPath",
    "java_projects_path": "javaProjectsPath",
    "delphi_projects_path": "delphiProjectsPath",
    "selected_python_path": "selectedPythonPath",
    "selected_node_path": "selectedNodePath",
    "selected_java_path": "selectedJavaPath",
    "selected_delphi_path": "selectedDelphiPath",
    "log_to_file": "logToFile",
    "command_timeout": "commandTimeout",
    "probe_timeout": "probeTimeout",
    "max_output_chars": "maxOutputChars",
}

_ROOT_FIELDS: dict[ProjectType, str] = {
    ProjectType.PYTHON: "python_projects_path",
    ProjectType.NODEJS: "nodejs_projects_path",
    ProjectType.WEBAPP: "webapps_path",
    ProjectType.JAVA: "java_projects_path",
    ProjectType.DELPHI: "delphi_projects_path",
}


@dataclass
class Settings:
    """
    Engine configuration, resolved once at load time.

    Project roots and selected toolchain paths are optional; None means
    "not configured". A command_timeout of None disables the deadline.
    """

    python_projects_path: str | None = None
    nodejs_projects_path: str | None = None
    webapps_path: str | None = None
    java_projects_path: str | None = None
    delphi_projects_path: str | None = None
    selected_python_path: str | None = None
    selected_node_path: str | None = None
    selected_java_path: str | None = None
    selected_delphi_path: str | None = None
    log_to_file: bool = False
    command_timeout: float | None = DEFAULT_COMMAND_TIMEOUT
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT
    max_output_chars: int = DEFAULT_MAX_OUTPUT_CHARS
    extra: dict[str, Any] = field(default_factory=dict)

    def project_roots(self) -> list[str]:
        """Return every configured project root, in project-type order."""
        roots = [getattr(self, name) for name in _ROOT_FIELDS.values()]
        return [root for root in roots if root]

    def root_for(self, project_type: ProjectType | str) -> str | None:
        """Return the configured root for one project type, if any."""
        try:
            return getattr(self, _ROOT_FIELDS[ProjectType(project_type)])
        except (KeyError, ValueError):
            return None

    @property
    def python_command(self) -> str:
        return self.selected_python_path or "python"

    @property
    def node_command(self) -> str:
        return self.selected_node_path or "node"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """
        Build settings from a decoded JSON document.

        Raises:
            ConfigurationError: If a known key has the wrong type.
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Settings document must be a JSON object")

        values: dict[str, Any] = {}
        known_keys = set(_JSON_KEYS.values())
        for attr, key in _JSON_KEYS.items():
            if key in data:
                values[attr] = _coerce(attr, key, data[key])

        extra = {k: v for k, v in data.items() if k not in known_keys}
        return cls(**values, extra=extra)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON document layout, unknown keys included."""
        document = dict(self.extra)
        for f in fields(self):
            if f.name == "extra":
                continue
            value = getattr(self, f.name)
            key = _JSON_KEYS[f.name]
            if value is None and f.default is None:
                document.pop(key, None)
                continue
            document[key] = value
        return document


def _coerce(attr: str, key: str, value: Any) -> Any:
    if attr == "log_to_file":
        if not isinstance(value, bool):
            raise ConfigurationError(f"Setting '{key}' must be a boolean")
        return value
    if attr in ("command_timeout", "probe_timeout"):
        if value is None and attr == "command_timeout":
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ConfigurationError(f"Setting '{key}' must be a positive number")
        return float(value)
    if attr == "max_output_chars":
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConfigurationError(f"Setting '{key}' must be a positive integer")
        return value
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"Setting '{key}' must be a string")
    return value


def default_settings_path() -> Path:
    """Location of the settings document (PROJECTSHELL_HOME overrides the home directory)."""
    home = os.environ.get("PROJECTSHELL_HOME")
    base = Path(home) if home else Path.home() / ".projectshell"
    return base / "settings.json"


class SettingsStore:
    """Reads and rewrites the settings document as a whole."""

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path else default_settings_path()

    def load(self) -> Settings:
        """
        Load settings from disk.

        Returns:
            Settings with defaults when the file does not exist.

        Raises:
            ConfigurationError: If the file is unreadable or malformed.
        """
        if not self.path.exists():
            logger.info(f"No settings file at {self.path}, using defaults")
            return Settings()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to read settings file {self.path}: {e}") from e
        return Settings.from_dict(data)

    def save(self, settings: Settings) -> None:
        """Rewrite the whole document."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self.path.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Failed to save settings file {self.path}: {e}") from e
        logger.debug(f"Settings saved to {self.path}")
