"""
Per-application directory holding defaults.yaml, the dirty marker and logs.
"""

import os
import re
import sys
from pathlib import Path

from . import APP_NAME

HOME_OVERRIDE_VAR = "MP3REPAIR_HOME"

_WINDOWS_VAR = re.compile(r'%([A-Za-z_][A-Za-z0-9_]*)%')


def application_path() -> Path:
    """Get the platform-appropriate application directory (not created)."""
    override = os.environ.get(HOME_OVERRIDE_VAR)
    if override:
        return Path(override)
    if sys.platform == "win32":
        base = os.environ.get("APPDATA", os.path.expanduser("~"))
    elif sys.platform == "darwin":
        base = os.path.join(os.path.expanduser("~"), "Library", "Application Support")
    else:
        base = os.environ.get("XDG_CONFIG_HOME", os.path.join(os.path.expanduser("~"), ".config"))
    return Path(base) / APP_NAME


def ensure_application_path() -> Path:
    """Create the application directory if needed and return it."""
    path = application_path()
    path.mkdir(parents=True, exist_ok=True)
    return path


def expand_references(value: str) -> str:
    """
    Expand environment variable references in a flag or config value.

    Handles $VAR, ${VAR} and %VAR%; unknown variables are left as written.
    A leading ~ is expanded to the home directory.
    """
    def windows_ref(match: re.Match) -> str:
        return os.environ.get(match.group(1), match.group(0))

    expanded = _WINDOWS_VAR.sub(windows_ref, value)
    expanded = os.path.expandvars(expanded)
    return os.path.expanduser(expanded)
