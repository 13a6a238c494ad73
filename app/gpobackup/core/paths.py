"""XDG-compliant path management for gpobackup.

XDG defaults:
- Config: ~/.config/gpobackup/
- State: ~/.local/state/gpobackup/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "gpobackup"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/gpobackup/ (or XDG_CONFIG_HOME/gpobackup/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    State data is the run log, which should persist between runs
    but is not configuration.

    Returns:
        Path to ~/.local/state/gpobackup/ (or XDG_STATE_HOME/gpobackup/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_config_path() -> Path:
    """Get the default settings file path.

    Returns:
        Path to ~/.config/gpobackup/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_theme_path() -> Path:
    """Get the user theme override path.

    Returns:
        Path to ~/.config/gpobackup/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def ensure_state_dir() -> Path:
    """Create the state directory if it doesn't exist.

    Returns:
        Path to the state directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    path = get_state_dir()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create state directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create state directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path
