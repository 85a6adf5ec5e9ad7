"""Settings models for pssh."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from pssh.loader.source import SYSTEM_CONFIG, USER_CONFIG
from pssh.runner import DEFAULT_COMMAND, DEFAULT_RETRY_DELAY
from pssh.selector.app import DEFAULT_PLACEHOLDER, DEFAULT_TABLE_HEIGHT

SETTINGS_FILE = "~/.config/pssh/pssh.yaml"


class SettingsError(Exception):
    """Error loading the pssh settings file."""

    pass


class SSHSettings(BaseModel):
    """Which ssh config files to read."""

    configs: list[str] = [SYSTEM_CONFIG, USER_CONFIG]
    optional: list[str] = [SYSTEM_CONFIG]  # Skipped silently when missing


class ConnectSettings(BaseModel):
    """How to connect once a host is chosen."""

    command: str = DEFAULT_COMMAND
    loop: bool = False
    retry_delay: float = Field(DEFAULT_RETRY_DELAY, ge=0)


class UISettings(BaseModel):
    """Selector appearance."""

    table_height: int = Field(DEFAULT_TABLE_HEIGHT, ge=1)
    placeholder: str = DEFAULT_PLACEHOLDER


class PsshConfig(BaseModel):
    """Main pssh settings."""

    ssh: SSHSettings = SSHSettings()
    connect: ConnectSettings = ConnectSettings()
    ui: UISettings = UISettings()


def load_config(path: Path) -> PsshConfig:
    """Load settings from YAML. A missing file gives the defaults."""
    if not path.exists():
        return PsshConfig()

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise SettingsError(f"Could not read settings file {path}: {e}") from e

    try:
        return PsshConfig(**(data or {}))
    except (TypeError, ValidationError) as e:
        raise SettingsError(f"Invalid settings file {path}: {e}") from e
