"""
Configuration management for the research map.

Settings are read from environment variables first (a .env file is loaded by
app.py through python-dotenv), then from config.json in the app directory.

Config keys:
- project_file: path to a project JSON file used to seed the map
- log_level: logging level name (default INFO)
- port: NiceGUI port (default 8081)
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from research_map.paths import get_config_path

logger = logging.getLogger(__name__)

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_PORT = 8081


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration from config.json. Missing or corrupt files yield {}."""
    config_path = Path(config_path) if config_path else get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
                return data if isinstance(data, dict) else {}
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Ignoring unreadable config {config_path}: {e}")
            return {}
    return {}


def save_config(config: dict, config_path: Optional[Path] = None) -> None:
    """Save configuration to config.json."""
    config_path = Path(config_path) if config_path else get_config_path()
    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=2)


def _setting(env_var: str, key: str, default=None, config_path: Optional[Path] = None):
    env_value = os.environ.get(env_var)
    if env_value:
        return env_value
    return load_config(config_path).get(key, default)


def get_project_file(config_path: Optional[Path] = None) -> Optional[str]:
    """
    Project file to seed the map from.
    
    Priority:
    1. Environment variable RESEARCH_MAP_PROJECT_FILE
    2. Stored in config.json as project_file
    """
    return _setting("RESEARCH_MAP_PROJECT_FILE", "project_file", config_path=config_path)


def set_project_file(path: str, config_path: Optional[Path] = None) -> None:
    config = load_config(config_path)
    config["project_file"] = path
    save_config(config, config_path)


def get_log_level(config_path: Optional[Path] = None) -> str:
    level = _setting("RESEARCH_MAP_LOG_LEVEL", "log_level", DEFAULT_LOG_LEVEL, config_path)
    level = str(level).upper()
    if not isinstance(logging.getLevelName(level), int):
        return DEFAULT_LOG_LEVEL
    return level


def get_port(config_path: Optional[Path] = None) -> int:
    value = _setting("RESEARCH_MAP_PORT", "port", DEFAULT_PORT, config_path)
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid port setting {value!r}, using {DEFAULT_PORT}")
        return DEFAULT_PORT
