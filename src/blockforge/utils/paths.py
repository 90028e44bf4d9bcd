"""
Path management for BlockForge

Handles platform-specific user data directories following standard conventions:
- macOS: ~/Library/Application Support/BlockForge/
- Linux: ~/.local/share/BlockForge/
- Windows: %APPDATA%/BlockForge/

Build inputs and outputs live in the Blockly checkout being packaged;
only logs go to these directories.
"""
import os
import sys
from pathlib import Path


# Application name
APP_NAME = "BlockForge"

# Project-local settings file, looked up in the build root
PROJECT_SETTINGS_FILE = "blockforge.json"


def get_user_data_dir() -> Path:
    """
    Get platform-specific user data directory.

    Returns:
        Path to user data directory where logs and user files are stored.
    """
    system = sys.platform

    if system == "darwin":  # macOS
        base = Path.home() / "Library" / "Application Support"
    elif system == "win32":  # Windows
        base = Path(os.getenv("APPDATA", Path.home() / "AppData" / "Roaming"))
    else:  # Linux and other Unix-like
        base = Path(os.getenv("XDG_DATA_HOME", Path.home() / ".local" / "share"))

    user_data_dir = base / APP_NAME
    user_data_dir.mkdir(parents=True, exist_ok=True)
    return user_data_dir


def get_logs_dir() -> Path:
    """
    Get directory for application logs.

    Returns:
        Path to logs directory (stored in user data directory).
    """
    logs_dir = get_user_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def get_project_settings_path(root: Path) -> Path:
    """Path of the project-local settings file inside a build root."""
    return Path(root) / PROJECT_SETTINGS_FILE
