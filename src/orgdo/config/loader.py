"""Configuration loader with YAML and environment variable support.

This module reads the configuration from ~/.config/orgdo/config.yaml and
allows environment variable overrides using the ORGDO_* prefix. When the file
does not exist the defaults are used and written out so the user has a file
to edit.

Environment variables:
- ORGDO_STATES: Comma-separated workflow state names (e.g. "TODO,WAIT,DONE")
- ORGDO_DEFAULT_STATE: State given to captured items
- ORGDO_DEFAULT_FILE: File used when no path is given
- ORGDO_AGENDA_DAYS: Number of days covered by the agenda
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
from pydantic import ValidationError

from orgdo.models.config import Config

logger = structlog.get_logger()


def default_config_path() -> Path:
    return Path.home() / ".config" / "orgdo" / "config.yaml"


def load_config(config_path: Optional[Path] = None, write_defaults: bool = True) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to config file. If None, uses ~/.config/orgdo/config.yaml
        write_defaults: Write the default configuration when the file is missing

    Returns:
        Validated Config object

    Raises:
        ValueError: If config file is invalid

    Environment Variables:
        ORGDO_STATES: Override states.states (names only, default colours)
        ORGDO_DEFAULT_STATE: Override states.default_new_task_state
        ORGDO_DEFAULT_FILE: Override files.default_file
        ORGDO_AGENDA_DAYS: Override ui.agenda_days
    """
    if config_path is None:
        config_path = default_config_path()

    if config_path.exists():
        try:
            data = Config.load(config_path).model_dump()
        except ValidationError as e:
            raise ValueError(f"Invalid configuration in {config_path}:\n{e}") from e
    else:
        data = {}
        if write_defaults:
            _write_defaults(config_path)

    data = _apply_env_overrides(data)

    try:
        config = Config(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {config_path}:\n{e}") from e

    logger.debug("config_loaded", path=str(config_path), states=config.state_names)
    return config


def _write_defaults(config_path: Path) -> None:
    """Write the default configuration; failure is logged and ignored."""
    try:
        Config().save(config_path)
        logger.info("config_defaults_written", path=str(config_path))
    except OSError as e:
        logger.warning("config_defaults_write_failed", path=str(config_path), error=str(e))


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to configuration data.

    Args:
        data: Base configuration dictionary from YAML

    Returns:
        Configuration dictionary with environment overrides applied
    """
    # Ensure nested structure exists
    for section in ("states", "files", "ui"):
        if data.get(section) is None:
            data[section] = {}

    if env_states := os.getenv("ORGDO_STATES"):
        names = [name.strip() for name in env_states.split(",") if name.strip()]
        if names:
            data["states"]["states"] = [{"name": name} for name in names]

    if env_default_state := os.getenv("ORGDO_DEFAULT_STATE"):
        data["states"]["default_new_task_state"] = env_default_state

    if env_default_file := os.getenv("ORGDO_DEFAULT_FILE"):
        data["files"]["default_file"] = env_default_file

    if env_agenda_days := os.getenv("ORGDO_AGENDA_DAYS"):
        try:
            data["ui"]["agenda_days"] = int(env_agenda_days)
        except ValueError:
            pass  # Invalid value, ignore

    return data
