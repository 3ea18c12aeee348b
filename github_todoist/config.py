"""Settings loaded from the environment."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import ConfigurationError, MissingConfigurationError

DEFAULT_THROTTLE_DELAY = 0.5
DEFAULT_REQUEST_TIMEOUT = 30.0


def config_dir() -> Path:
    """$XDG_CONFIG_HOME/github-todoist, falling back to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser("~/.config")
    return Path(xdg_config) / "github-todoist"


def default_state_file() -> Path:
    return config_dir() / "state.json"


@dataclass
class Settings:
    github_token: str
    todoist_token: str
    todoist_project_id: Optional[str] = None
    todoist_section_id: Optional[str] = None
    throttle_delay: float = DEFAULT_THROTTLE_DELAY
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    state_file: Optional[Path] = None

    def __post_init__(self):
        if self.state_file is None:
            self.state_file = default_state_file()


def _optional(name: str) -> Optional[str]:
    value = os.environ.get(name, "").strip()
    return value or None


def _float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number of seconds, got {raw!r}")
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {raw!r}")
    return value


def load_settings(state_file: Optional[str] = None) -> Settings:
    """Build Settings from environment variables.

    Raises MissingConfigurationError when either token is missing or blank,
    and ConfigurationError for unparseable numeric values.
    """
    missing = [
        name for name in ("GITHUB_TOKEN", "TODOIST_TOKEN")
        if not os.environ.get(name, "").strip()
    ]
    if missing:
        raise MissingConfigurationError(
            f"Missing configuration for: {', '.join(missing)}"
        )

    state_path = state_file or _optional("GITHUB_TODOIST_STATE_FILE")

    return Settings(
        github_token=os.environ["GITHUB_TOKEN"].strip(),
        todoist_token=os.environ["TODOIST_TOKEN"].strip(),
        todoist_project_id=_optional("TODOIST_PROJECT_ID"),
        todoist_section_id=_optional("TODOIST_SECTION_ID"),
        throttle_delay=_float("THROTTLE_DELAY_SECONDS", DEFAULT_THROTTLE_DELAY),
        request_timeout=_float("REQUEST_TIMEOUT_SECONDS", DEFAULT_REQUEST_TIMEOUT),
        state_file=Path(state_path) if state_path else None
    )
