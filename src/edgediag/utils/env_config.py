"""Environment configuration loader for edgediag

Settings are read from the process environment, optionally seeded from a
.env file. Environment variables already set always win over the file.
"""

import os
import logging
from pathlib import Path
from typing import Dict, Optional

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

# Default configuration values
DEFAULTS = {
    # Logging
    'EDGEDIAG_LOG_LEVEL': 'INFO',
    'EDGEDIAG_LOG_FILE': '',

    # edgecore agent
    'EDGECORE_CONFIG_PATH': '/etc/kubeedge/config/edgecore.yaml',
    'EDGECORE_DATA_SOURCE': '/var/lib/kubeedge/edgecore.db',
    'EDGECORE_BINARY_NAME': 'edgecore',

    # Install readiness thresholds
    'EDGEDIAG_MIN_CPU': '1',
    'EDGEDIAG_MIN_MEMORY_MB': '256',
    'EDGEDIAG_MIN_DISK_GB': '1',
    'EDGEDIAG_MAX_PID_RATE': '0.05',
}


def find_env_file() -> Optional[Path]:
    """Find the .env file in standard locations"""
    search_paths = [
        Path.cwd() / '.env',
        Path('/etc/kubeedge/edgediag.env'),
        Path.home() / '.edgediag.env',
    ]

    for path in search_paths:
        if path.exists():
            return path

    return None


def load_env_file(env_path: Optional[Path] = None) -> Dict[str, str]:
    """Load variables from a .env file into os.environ

    Args:
        env_path: Optional path to .env file. If None, auto-discovers.

    Returns:
        Dictionary of variables that were applied
    """
    if env_path is None:
        env_path = find_env_file()

    if env_path is None or not env_path.exists():
        return {}

    loaded = {}
    for key, value in dotenv_values(env_path).items():
        if value is None or key in os.environ:
            continue
        os.environ[key] = value
        loaded[key] = value

    logger.debug(f"Loaded {len(loaded)} settings from {env_path}")
    return loaded


def get_config(key: str, default: Optional[str] = None) -> str:
    """Get configuration value from environment or defaults

    Priority:
    1. Environment variable
    2. Provided default
    3. Built-in default
    """
    value = os.environ.get(key)
    if value:
        return value
    if default is not None:
        return default
    return DEFAULTS.get(key, '')


def get_config_int(key: str, default: int = 0) -> int:
    """Get integer configuration value"""
    try:
        return int(get_config(key, str(default)))
    except ValueError:
        return default


def get_config_float(key: str, default: float = 0.0) -> float:
    """Get float configuration value"""
    try:
        return float(get_config(key, str(default)))
    except ValueError:
        return default
