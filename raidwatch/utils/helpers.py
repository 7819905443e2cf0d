"""Filesystem locations under the raidwatch home directory, plus text helpers."""

import os
from pathlib import Path

HOME_ENV = "RAIDWATCH_HOME"


def ensure_dir(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def home_root() -> Path:
    """``$RAIDWATCH_HOME`` when set, otherwise ``~/.raidwatch``. Not created."""
    override = os.environ.get(HOME_ENV, "").strip()
    return Path(override).expanduser() if override else Path.home() / ".raidwatch"


def get_home_path() -> Path:
    return ensure_dir(home_root())


def get_state_path(name: str) -> Path:
    """Named subdirectory of the home dir: ``data`` holds the cursor, ``logs`` the log files."""
    return ensure_dir(get_home_path() / name)


def get_env_file() -> Path:
    return home_root() / ".env"


def truncate(text: str, limit: int) -> str:
    """Shorten *text* to ``limit`` characters with an ellipsis marker."""
    if len(text) <= limit:
        return text
    return text[: max(0, limit - 3)] + "..."
