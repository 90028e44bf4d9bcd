"""
Settings management for BlockForge

Loads the project-local blockforge.json from the build root and merges it
over the defaults below. A missing file means defaults.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from blockforge.utils.message import Log
from blockforge.utils.paths import get_project_settings_path

# Default settings
DEFAULT_SETTINGS = {
    # Output directory for packaged artifacts, relative to the build root
    "dist_dir": "dist",

    # External full build of the compressed bundles
    "build_command": ["python", "build.py"],

    # Typings generation
    "node_command": "node",
    "typings_generator": "./node_modules/typescript-closure-tools/definition-generator/src/main.js",

    # Watch settings
    "watch_debounce_ms": 2000,  # Milliseconds to delay rebuild
    "watch_poll_interval": 0.5,  # Seconds between file tree snapshots

    # Task runner
    "max_workers": 8,  # Threads used for parallel task waves

    # Logging
    "log_level": "INFO",
}


class SettingsError(ValueError):
    """Raised when a settings file cannot be parsed"""


class Settings:
    """Project settings manager"""

    def __init__(self, root: Optional[Path] = None, overrides: Optional[Dict[str, Any]] = None):
        self.root = Path(root) if root is not None else Path.cwd()
        self.path = get_project_settings_path(self.root)
        self.settings = json.loads(json.dumps(DEFAULT_SETTINGS))  # deep copy
        self.load_settings()
        if overrides:
            self.settings.update(overrides)

    def load_settings(self):
        """Load settings from the project file, if present"""
        if not self.path.exists():
            Log.debug(f"Settings: No {self.path.name} in {self.root}, using defaults")
            return
        try:
            with open(self.path, 'r', encoding='utf-8') as file:
                saved_settings = json.load(file)
        except json.JSONDecodeError as e:
            raise SettingsError(f"Invalid settings file {self.path}: {e}") from e

        if not isinstance(saved_settings, dict):
            raise SettingsError(f"Settings file {self.path} must contain a JSON object")

        unknown = sorted(set(saved_settings) - set(DEFAULT_SETTINGS))
        if unknown:
            Log.warning(f"Settings: Ignoring unknown keys in {self.path.name}: {', '.join(unknown)}")
        for key in unknown:
            saved_settings.pop(key)

        self.settings.update(saved_settings)
        Log.info(f"Settings loaded from {self.path}")

    def save_settings(self):
        """Save settings to the project file"""
        os.makedirs(self.path.parent, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as file:
            json.dump(self.settings, file, indent=4)
        Log.info(f"Settings saved to {self.path}")

    def get(self, key, default=None):
        """Get a setting value"""
        return self.settings.get(key, default)

    def set(self, key, value):
        """Set a setting value (in memory; call save_settings to persist)"""
        self.settings[key] = value

    @property
    def dist_dir(self) -> Path:
        """Absolute output directory for packaged artifacts"""
        return self.root / self.get("dist_dir", DEFAULT_SETTINGS["dist_dir"])

    @property
    def build_command(self) -> list:
        command = self.get("build_command", DEFAULT_SETTINGS["build_command"])
        if isinstance(command, str):
            return command.split()
        return list(command)

    @property
    def watch_debounce_seconds(self) -> float:
        return float(self.get("watch_debounce_ms", DEFAULT_SETTINGS["watch_debounce_ms"])) / 1000.0
